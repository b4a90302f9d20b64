"""Unit tests for path parsing and compilation."""

from typing import Any, Optional

import pytest

from nestwatch import (
    Chain,
    ConfigurationError,
    ObservableObject,
    compile_path,
    make_accessor,
    observable,
    parse_path,
)
from tests.utils.models import Car, Engine, Garage, PlainEngine


class Workshop(ObservableObject):
    plain: Optional[PlainEngine] = observable()
    loose: Any = observable()
    untyped = observable()
    garage: Optional["Garage"] = observable()


@pytest.mark.unit
class TestParsePath:
    def test_splits_on_dots(self):
        assert parse_path("car.engine.power") == ("car", "engine", "power")

    def test_single_segment(self):
        assert parse_path("name") == ("name",)

    def test_accepts_sequences(self):
        assert parse_path(["car", "engine"]) == ("car", "engine")

    def test_strips_whitespace(self):
        assert parse_path(" car . engine ") == ("car", "engine")

    @pytest.mark.parametrize("path", ["", "   ", ".", "car..power", ".car", "car."])
    def test_rejects_empty_segments(self, path):
        with pytest.raises(ConfigurationError):
            parse_path(path)

    def test_rejects_empty_sequence(self):
        with pytest.raises(ConfigurationError):
            parse_path([])


@pytest.mark.unit
class TestCompilePath:
    def test_three_segment_chain(self):
        chain = compile_path(Garage, "car.engine.power")

        assert isinstance(chain, Chain)
        assert chain.root_type is Garage
        assert chain.path == ("car", "engine", "power")
        assert chain.depth == 3
        assert chain.dotted == "car.engine.power"
        assert [link.property_name for link in chain.links] == ["car", "engine"]
        assert [link.declared_type for link in chain.links] == [Car, Engine]
        assert chain.leaf_name == "power"
        assert chain.leaf_type is int

    def test_link_accessors_read_the_next_value(self):
        chain = compile_path(Garage, "car.engine.power")
        engine = Engine(10)
        garage = Garage()
        garage.car = Car(engine)

        car = chain.links[0].accessor(garage)
        assert car is garage.car
        assert chain.links[1].accessor(car) is engine

    def test_accessors_come_from_the_pool(self):
        chain = compile_path(Garage, "car.engine.power")
        assert chain.links[0].accessor is make_accessor(Garage, "car")

    def test_single_segment_has_no_links(self):
        chain = compile_path(Garage, "name")
        assert chain.links == ()
        assert chain.leaf_name == "name"
        assert chain.depth == 1

    def test_compilation_is_deterministic(self):
        assert compile_path(Garage, "car.engine.power") == compile_path(
            Garage, "car.engine.power"
        )

    def test_forward_reference_annotations_resolve(self):
        chain = compile_path(Workshop, "garage.car.color")
        assert chain.links[0].declared_type is Garage

    def test_leaf_type_need_not_be_observable(self):
        chain = compile_path(Workshop, "plain")
        assert chain.leaf_type is PlainEngine

    def test_unknown_first_segment(self):
        with pytest.raises(ConfigurationError) as excinfo:
            compile_path(Garage, "truck.engine.power")

        error = excinfo.value
        assert error.declaring_type is Garage
        assert error.property_name == "truck"
        assert error.path == ("truck", "engine", "power")
        assert error.dotted_path == "truck.engine.power"

    def test_unknown_middle_segment(self):
        with pytest.raises(ConfigurationError) as excinfo:
            compile_path(Garage, "car.motor.power")
        assert excinfo.value.declaring_type is Car
        assert excinfo.value.property_name == "motor"

    def test_unknown_leaf(self):
        with pytest.raises(ConfigurationError) as excinfo:
            compile_path(Garage, "car.engine.torque")
        assert excinfo.value.declaring_type is Engine
        assert excinfo.value.property_name == "torque"

    def test_intermediate_type_must_be_observable(self):
        with pytest.raises(ConfigurationError, match="cannot raise property change"):
            compile_path(Workshop, "plain.power.real")

    def test_root_type_must_be_observable_for_nested_paths(self):
        with pytest.raises(ConfigurationError) as excinfo:
            compile_path(PlainEngine, "power.real")
        assert excinfo.value.declaring_type is PlainEngine

    def test_intermediate_without_single_declared_type(self):
        for path in ("loose.power", "untyped.power"):
            with pytest.raises(ConfigurationError, match="declare a single type"):
                compile_path(Workshop, path)

    def test_holder_of_the_leaf_is_not_checked(self):
        """The last type on the path only has to declare the leaf"""
        chain = compile_path(Workshop, "plain.power")
        assert chain.links[0].declared_type is PlainEngine
        assert chain.leaf_name == "power"

    def test_unresolved_forward_reference_is_named(self):
        class Depot(ObservableObject):
            truck: Optional["Lorry"] = observable()

        with pytest.raises(ConfigurationError, match="'Lorry'") as excinfo:
            compile_path(Depot, "truck.load")

        assert "could not be resolved" in str(excinfo.value)
        assert excinfo.value.property_name == "truck"
