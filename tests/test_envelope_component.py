import pytest

from decimal import Decimal

from envelope_calc import COOLING_WARNING, OPTIMISE_PROMPT, TARGET_TOO_LOW_WARNING, EnvelopeConfig, Room
from envelope_component import INPUTS, OUTPUTS, MessageLevel, ThermalEnvelopeComponent, solve


def reference_room():
    return Room(length_m=5.0, width_m=4.0, height_m=2.5)


def test_interface_order_and_defaults():
    assert [spec.name for spec in INPUTS] == [
        "Room",
        "WindowPercentage",
        "ExternalTemp",
        "DesiredTemp",
        "WallUValue",
        "WindowUValue",
        "RoofUValue",
        "FloorUValue",
        "InternalGains",
        "SolarGains",
        "TargetHeatLoss",
        "Optimise",
    ]
    assert [spec.default for spec in INPUTS[1:]] == [20.0, 5.0, 20.0, 0.3, 1.4, 0.2, 0.25, 200.0, 0.0, 0.0, False]
    assert [spec.name for spec in INPUTS if spec.optional] == ["SolarGains", "TargetHeatLoss"]
    assert [spec.name for spec in OUTPUTS][-3:] == ["RecommendedInsulation", "OptimizedRoom", "Report"]


def test_default_solve_writes_all_outputs():
    room = reference_room()
    outcome = solve(room)

    assert outcome.ok
    assert outcome.messages == []
    assert list(outcome.outputs) == [spec.name for spec in OUTPUTS]
    assert outcome.outputs["TotalHeatLoss"] == pytest.approx(486.0)
    assert outcome.outputs["NetHeating"] == pytest.approx(286.0)
    assert outcome.outputs["WallLoss"] == pytest.approx(162.0)
    assert outcome.outputs["WindowLoss"] == pytest.approx(189.0)
    assert outcome.outputs["RoofLoss"] == pytest.approx(60.0)
    assert outcome.outputs["FloorLoss"] == pytest.approx(75.0)
    assert outcome.outputs["SurfaceToVolume"] == pytest.approx(1.7)
    assert outcome.outputs["HeatLossPerM2"] == pytest.approx(24.3)
    assert outcome.outputs["RecommendedWallU"] == 0.3
    assert outcome.outputs["RecommendedInsulation"] == 0.0
    assert outcome.outputs["OptimizedRoom"] is room
    assert "TOTAL: 486 W" in outcome.outputs["Report"]


def test_positional_and_keyword_inputs_agree():
    component = ThermalEnvelopeComponent()
    room = reference_room()
    by_position = component.solve(room, 30.0, 0.0, 21.0, 0.15)
    by_name = component.solve(room, WindowPercentage=30.0, ExternalTemp=0.0, DesiredTemp=21.0, WallUValue=0.15)
    by_attr = component.solve(room=room, window_percentage=30.0, external_temp_c=0.0, desired_temp_c=21.0, u_wall_w_m2k=0.15)

    assert by_position.outputs["TotalHeatLoss"] == pytest.approx(by_name.outputs["TotalHeatLoss"])
    assert by_attr.outputs["TotalHeatLoss"] == pytest.approx(by_name.outputs["TotalHeatLoss"])


def test_none_inputs_fall_back_to_defaults():
    outcome = solve(reference_room(), None, None, SolarGains=None)
    assert outcome.outputs["TotalHeatLoss"] == pytest.approx(486.0)


def test_bad_bindings_raise():
    component = ThermalEnvelopeComponent()
    with pytest.raises(TypeError, match="Unknown input"):
        component.solve(reference_room(), Colour="red")
    with pytest.raises(TypeError, match="more than once"):
        component.solve(reference_room(), 20.0, WindowPercentage=30.0)
    with pytest.raises(TypeError):
        component.solve(reference_room(), *range(12))


def test_missing_room():
    outcome = solve(None)
    assert not outcome.ok
    assert outcome.texts(MessageLevel.WARNING) == ["Input parameter Room failed to collect data"]


def test_window_percentage_error_writes_nothing():
    outcome = solve(reference_room(), 150.0)
    assert outcome.outputs is None
    assert outcome.texts(MessageLevel.ERROR) == ["Window percentage must be between 0 and 100"]


def test_degenerate_room_error_writes_nothing():
    outcome = solve(Room(length_m=5.0, width_m=4.0, height_m=0.0))
    assert outcome.outputs is None
    assert outcome.texts(MessageLevel.ERROR) == ["Invalid room geometry"]


def test_unconvertible_input():
    outcome = solve(reference_room(), WallUValue="thick")
    assert outcome.outputs is None
    assert outcome.texts(MessageLevel.ERROR) == ["Input parameter WallUValue failed to collect data"]


def test_computation_fault_becomes_error_message():
    outcome = solve(reference_room(), WindowPercentage=100.0, TargetHeatLoss=2000.0, Optimise=True)
    assert outcome.outputs is None
    errors = outcome.texts(MessageLevel.ERROR)
    assert len(errors) == 1
    assert "division by zero" in errors[0]


def test_advisory_warnings_still_write_outputs():
    outcome = solve(reference_room(), InternalGains=5000.0, TargetHeatLoss=100.0, Optimise=True)
    assert outcome.ok
    assert outcome.texts(MessageLevel.WARNING) == [TARGET_TOO_LOW_WARNING, COOLING_WARNING]
    assert outcome.outputs["RecommendedInsulation"] == 0.0


def test_remark_when_target_set_without_optimise():
    outcome = solve(reference_room(), TargetHeatLoss=400.0)
    assert outcome.ok
    assert outcome.texts(MessageLevel.REMARK) == [OPTIMISE_PROMPT]
    assert OPTIMISE_PROMPT in outcome.outputs["Report"]
    assert outcome.outputs["OptimizedRoom"].length_m == 5.0


def test_component_config_is_used():
    component = ThermalEnvelopeComponent(EnvelopeConfig(insulation_conductivity_w_mk=0.07, vertical_offset="both"))
    outcome = component.solve(reference_room(), TargetHeatLoss=400.0, Optimise=True)
    added_r = 540.0 / 76.0 - 1.0 / 0.3
    assert outcome.outputs["RecommendedInsulation"] == pytest.approx(added_r * 70.0)
    offset = outcome.outputs["RecommendedInsulation"] / 1000.0
    assert outcome.outputs["OptimizedRoom"].height_m == pytest.approx(2.5 + 2 * offset)


@pytest.mark.parametrize(
    "room",
    [
        Room(length_m="5", width_m="4", height_m="2.5"),
        Room(length_m="abc", width_m=4.0, height_m=2.5),
        Room(length_m=Decimal("5"), width_m=Decimal("4"), height_m=Decimal("2.5")),
        Room(length_m=5.0, width_m=4.0, height_m=2.5, center=("x", 0.0, 0.0)),
        "not a room",
    ],
)
def test_malformed_room_becomes_error_message(room):
    outcome = solve(room)
    assert outcome.outputs is None
    assert len(outcome.texts(MessageLevel.ERROR)) == 1


def test_unexpected_fault_becomes_error_message(monkeypatch):
    import envelope_component

    def broken(*args, **kwargs):
        raise KeyError("boom")

    monkeypatch.setattr(envelope_component, "calculate_envelope", broken)
    outcome = solve(reference_room())
    assert outcome.outputs is None
    assert outcome.texts(MessageLevel.ERROR) == ["KeyError: 'boom'"]


@pytest.mark.parametrize("flag", ["false", "FALSE", " 0 ", False])
def test_optimise_false_values(flag):
    room = reference_room()
    outcome = solve(room, TargetHeatLoss=400.0, Optimise=flag)
    assert outcome.outputs["RecommendedInsulation"] == 0.0
    assert outcome.outputs["OptimizedRoom"] is room


@pytest.mark.parametrize("flag", ["true", "True", "1", True])
def test_optimise_true_values(flag):
    outcome = solve(reference_room(), TargetHeatLoss=400.0, Optimise=flag)
    assert outcome.outputs["RecommendedInsulation"] == pytest.approx(132.0175, rel=1e-4)


@pytest.mark.parametrize("flag", ["yes", "off", 2, 1.0])
def test_optimise_rejects_other_values(flag):
    outcome = solve(reference_room(), TargetHeatLoss=400.0, Optimise=flag)
    assert outcome.outputs is None
    assert outcome.texts(MessageLevel.ERROR) == ["Input parameter Optimise failed to collect data"]


def test_window_percentage_checked_before_room():
    outcome = solve(Room(length_m=5.0, width_m=4.0, height_m=0.0), 150.0)
    assert outcome.texts(MessageLevel.ERROR) == ["Window percentage must be between 0 and 100"]
