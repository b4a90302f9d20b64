from typing import Optional

from nestwatch import (
    ConfigurationError,
    NestedPropertyRegistration,
    ObservableObject,
    check_declarations,
    depends_on_nested,
    observable,
    track_nested,
)

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Defining observable objects")
print("-" * 100)
print()


# Assigning an observable attribute notifies every property observer of its owner.
class Address(ObservableObject):
    city: str = observable("Paris")


class Customer(ObservableObject):
    name: str = observable("Alice")
    address: Optional[Address] = observable()


customer = Customer()
customer.add_property_observer(lambda sender, name: print(f"Customer.{name} changed"))
customer.name = "Bob"
customer.address = Address()

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Depending on a nested path")
print("-" * 100)
print()


# The annotation of every intermediate attribute tells the path which type comes next.
class Invoice(ObservableObject):
    customer: Optional[Customer] = observable()

    @property
    @depends_on_nested("customer.address.city")
    def ships_to(self) -> Optional[str]:
        if self.customer is None or self.customer.address is None:
            return None
        return self.customer.address.city


invoice = Invoice()
invoice.customer = Customer()
invoice.customer.address = Address()


def show(name):
    print(f"{name} may have changed, now: {getattr(invoice, name)}")


# Binding reports every dependent property once right away.
registration = NestedPropertyRegistration.create(invoice, show)

# Any link of the path can change; the chain follows the new objects.
invoice.customer.address.city = "Lyon"
invoice.customer.address = Address()
invoice.customer = None  # Reports once, then stays quiet until the link is back
invoice.customer = customer

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Disposing")
print("-" * 100)
print()

registration.dispose()

# This should NOT report anymore
invoice.customer.address.city = "Nice"

# track_nested reports through the object's own observers instead of a callback.
invoice.add_property_observer(lambda sender, name: print(f"Invoice.{name} changed"))
with track_nested(invoice):
    invoice.customer.address.city = "Lille"

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Catching mistakes")
print("-" * 100)
print()


class Broken(ObservableObject):
    customer: Optional[Customer] = observable()

    @property
    @depends_on_nested("customer.adress.city")
    def ships_to(self):
        return None


for diagnostic in check_declarations(Broken):
    print(f"[{diagnostic.code}] {diagnostic.message}")

try:
    NestedPropertyRegistration.create(Broken(), print)
except ConfigurationError as error:
    print(f"Refused: {error}")
