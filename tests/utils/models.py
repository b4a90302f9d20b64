"""Observable model classes shared by the tests."""

from typing import Optional

from nestwatch import ObservableObject, depends_on_nested, observable


class Engine(ObservableObject):
    power: int = observable(100)
    serial: str = observable("E-1")

    def __init__(self, power: int = 100):
        self.power = power


class Car(ObservableObject):
    engine: Optional[Engine] = observable()
    color: str = observable("red")

    def __init__(self, engine: Optional[Engine] = None):
        if engine is not None:
            self.engine = engine


class Garage(ObservableObject):
    car: Optional[Car] = observable()
    name: str = observable("garage")

    @property
    @depends_on_nested("car.engine.power")
    def horsepower(self) -> Optional[int]:
        if self.car is None or self.car.engine is None:
            return None
        return self.car.engine.power

    @property
    @depends_on_nested("car.engine.power")
    def power_label(self) -> str:
        return f"{self.horsepower} hp"

    @property
    @depends_on_nested("name")
    def title(self) -> str:
        return self.name.title()


class Fleet(ObservableObject):
    """Depends on two paths through one property."""

    garage: Optional[Garage] = observable()
    spare: Optional[Car] = observable()

    @property
    @depends_on_nested("garage.car.color")
    @depends_on_nested("spare.color")
    def colors(self) -> tuple:
        return (
            self.garage.car.color if self.garage and self.garage.car else None,
            self.spare.color if self.spare else None,
        )


class ManualNotifier:
    """Implements the notification protocol without ObservableObject."""

    def __init__(self, value=0):
        self._observers = []
        self._value = value

    @property
    def value(self) -> int:
        return self._value

    @value.setter
    def value(self, new):
        self._value = new
        for observer in list(self._observers):
            observer(self, "value")

    def add_property_observer(self, observer):
        self._observers.append(observer)

    def remove_property_observer(self, observer):
        if observer in self._observers:
            self._observers.remove(observer)


class ManualHolder(ObservableObject):
    source: Optional[ManualNotifier] = observable()

    @property
    @depends_on_nested("source.value")
    def doubled(self) -> int:
        return self.source.value * 2 if self.source else 0


class PlainEngine:
    """Has the right shape but cannot notify."""

    power: int = 0


def make_garage(power: int = 100) -> Garage:
    garage = Garage()
    garage.car = Car(Engine(power))
    return garage


class Segment(ObservableObject):
    """Self-similar link used to build arbitrarily deep paths."""

    next: Optional["Segment"] = observable()
    value: int = observable(0)


def build_segments(count: int) -> Segment:
    """Build ``count`` segments linked through ``next``; return the first."""
    head = Segment()
    current = head
    for _ in range(count - 1):
        current.next = Segment()
        current = current.next
    return head
