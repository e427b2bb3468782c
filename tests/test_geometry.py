import pytest

from lidarscope.geometry import (
    COLOR,
    OPACITY,
    REPRESENTATION,
    SURFACE,
    Box,
    Car,
    Color,
    Vect3,
    inbetween,
)


class RecordingViewer:
    def __init__(self):
        self.cubes = {}
        self.properties = {}

    def add_cube(self, x_min, x_max, y_min, y_max, z_min, z_max, color, name):
        self.cubes[name] = (x_min, x_max, y_min, y_max, z_min, z_max, color)

    def set_property(self, name, key, value):
        self.properties[(name, key)] = value


@pytest.fixture
def car():
    return Car(Vect3(15, 0, 0), Vect3(4, 2, 2), Color(0, 0, 1), "car1")


def test_vect3_addition():
    assert Vect3(1, 2, 3) + Vect3(0.5, -2, 1) == Vect3(1.5, 0, 4)


def test_vect3_add_rejects_other_types():
    with pytest.raises(TypeError):
        Vect3(1, 2, 3) + 1


def test_inbetween_is_inclusive():
    assert inbetween(3.0, 2.0, 1.0)
    assert inbetween(1.0, 2.0, 1.0)
    assert not inbetween(3.5, 2.0, 1.0)


def test_collision_with_body(car):
    assert car.check_collision(Vect3(15, 0, 0.5))
    assert car.check_collision(Vect3(13, 1, 0))


def test_collision_with_cabin_only_in_middle(car):
    # Above the body, in the cabin region near the centre.
    assert car.check_collision(Vect3(15, 0, 1.8))
    # Above the body but beyond the cabin's length.
    assert not car.check_collision(Vect3(13.5, 0, 1.8))


def test_no_collision_outside(car):
    assert not car.check_collision(Vect3(0, 0, 0.5))
    assert not car.check_collision(Vect3(15, 0, 2.5))


def test_render_adds_body_and_cabin(car):
    viewer = RecordingViewer()
    car.render(viewer)
    assert set(viewer.cubes) == {"car1", "car1Top"}
    body = viewer.cubes["car1"]
    top = viewer.cubes["car1Top"]
    assert top[4] == pytest.approx(body[5])
    assert top[5] == pytest.approx(car.position.z + car.dimensions.z)
    assert top[1] - top[0] == pytest.approx((body[1] - body[0]) / 2)
    assert body[6] == car.color


def test_render_sets_surface_properties(car):
    viewer = RecordingViewer()
    car.render(viewer)
    for name in ("car1", "car1Top"):
        assert viewer.properties[(name, REPRESENTATION)] == SURFACE
        assert viewer.properties[(name, COLOR)] == car.color
        assert viewer.properties[(name, OPACITY)] == 1.0


def test_box_is_mutable_copy_semantics():
    window = Box(-10, -10, 0, 10, 10, 0)
    window.x_max = 3
    assert window == Box(-10, -10, 0, 3, 10, 0)