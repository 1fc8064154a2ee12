"""Tests for the simulation facade."""

import json
import logging
from dataclasses import FrozenInstanceError, replace
from datetime import date, timedelta

import numpy as np
import pytest

from weather_generation.climate_profile import resolve_profile
from weather_generation.exceptions import (
    InvalidArgumentError,
    ProfileValidationError,
    SimulationInvariantError,
)
from weather_generation.simulation import (
    WeatherSimulation,
    advance_hours,
    advance_regions,
    create_simulation,
    get_active_systems,
    get_celestial,
    get_current_snapshot,
    get_hazards,
)
from weather_generation.extreme_weather import Hazard
from weather_generation.weather_systems import SystemType, WeatherSystem
from weather_utils.config import Configuration


def test_advance_returns_exactly_n_hourly_snapshots(scenario_profile, start):
    simulation = create_simulation(scenario_profile, seed=42, start=start)

    snapshots = advance_hours(simulation, 24)

    assert len(snapshots) == 24
    assert snapshots[0].timestamp == start + timedelta(hours=1)
    for earlier, later in zip(snapshots, snapshots[1:]):
        assert later.timestamp - earlier.timestamp == timedelta(hours=1)
    assert get_current_snapshot(simulation) is snapshots[-1]


def test_runs_with_same_seed_are_identical(scenario_profile, start):
    first = advance_hours(create_simulation(scenario_profile, 42, start), 96)
    second = advance_hours(create_simulation(scenario_profile, 42, start), 96)

    assert first == second


def test_split_advances_match_one_long_advance(scenario_profile, start):
    whole = advance_hours(create_simulation(scenario_profile, 8, start), 48)

    simulation = create_simulation(scenario_profile, 8, start)
    pieces = advance_hours(simulation, 10) + advance_hours(simulation, 1) + advance_hours(simulation, 37)

    assert pieces == whole


def test_trend_matches_consecutive_pressures(stormy_profile, start):
    simulation = create_simulation(stormy_profile, seed=5, start=start)
    initial = get_current_snapshot(simulation)
    snapshots = [initial] + advance_hours(simulation, 200)

    assert initial.pressure_trend == 0.0
    for previous, current in zip(snapshots, snapshots[1:]):
        assert current.pressure_trend == pytest.approx(current.pressure - previous.pressure)


def test_fields_stay_in_bounds(stormy_profile, start):
    simulation = create_simulation(stormy_profile, seed=13, start=start)

    for snapshot in advance_hours(simulation, 500):
        assert 0.0 <= snapshot.instability <= 10.0
        assert 0.0 <= snapshot.humidity <= 100.0
        assert 0.0 <= snapshot.cloud_cover <= 100.0


def test_no_storms_means_no_systems(calm_profile, start):
    simulation = create_simulation(calm_profile, seed=99, start=start)

    for snapshot in advance_hours(simulation, 500):
        assert snapshot.systems == ()
    assert get_active_systems(simulation) == ()


def test_warm_maritime_scenario_stays_mild(scenario_profile, start):
    for seed in (42, 7, 1234):
        snapshots = advance_hours(create_simulation(scenario_profile, seed, start), 24)

        assert len(snapshots) == 24
        for snapshot in snapshots:
            assert 55.0 <= snapshot.temperature <= 85.0


def test_spawn_rate_across_seeded_runs(scenario_profile, start):
    runs = 400
    spawned = sum(
        len(advance_hours(create_simulation(scenario_profile, seed, start), 1)[0].systems)
        for seed in range(runs)
    )

    # Empty region, so the first hour spawns with base_spawn_rate * storm_frequency
    assert spawned / runs == pytest.approx(0.2 * 0.5, abs=0.05)


@pytest.mark.parametrize("hours", [0, -3, 1.5, True, "2"])
def test_invalid_hours_emit_nothing(scenario_profile, start, hours):
    simulation = create_simulation(scenario_profile, seed=1, start=start)
    before = get_current_snapshot(simulation)

    with pytest.raises(InvalidArgumentError):
        advance_hours(simulation, hours)

    assert get_current_snapshot(simulation) is before
    assert simulation.current_time == start


def test_malformed_profile_is_rejected(scenario_profile):
    data = scenario_profile.to_dict()
    del data["base_temp"]

    with pytest.raises(ProfileValidationError):
        create_simulation(data, seed=1)


def test_profile_mapping_is_accepted(scenario_profile, start):
    from_mapping = advance_hours(create_simulation(scenario_profile.to_dict(), 3, start), 12)
    from_profile = advance_hours(create_simulation(scenario_profile, 3, start), 12)

    assert from_mapping == from_profile


def test_returned_values_are_immutable(stormy_profile, start):
    simulation = create_simulation(stormy_profile, seed=2, start=start)
    snapshot = advance_hours(simulation, 30)[-1]
    systems = get_active_systems(simulation)

    assert isinstance(systems, tuple)
    with pytest.raises(FrozenInstanceError):
        snapshot.temperature = 0.0

    advance_hours(simulation, 30)
    assert snapshot.systems == systems


def test_exported_state_resumes_identically(stormy_profile, start):
    original = create_simulation(stormy_profile, seed=17, start=start)
    advance_hours(original, 40)

    state = json.loads(json.dumps(original.export_state()))
    restored = WeatherSimulation.from_state(state)

    assert get_current_snapshot(restored) == get_current_snapshot(original)
    assert get_active_systems(restored) == get_active_systems(original)
    assert advance_hours(restored, 60) == advance_hours(original, 60)


def test_unknown_state_version_is_rejected(scenario_profile):
    state = create_simulation(scenario_profile, seed=1).export_state()
    state["version"] = 99

    with pytest.raises(InvalidArgumentError):
        WeatherSimulation.from_state(state)


def test_invariant_violation_stops_the_simulation(scenario_profile, start):
    simulation = create_simulation(scenario_profile, seed=1, start=start)
    simulation.scheduler.systems = (
        WeatherSystem(id=1, type=SystemType.LOW_PRESSURE, intensity=0.5, position=float("nan")),
    )

    with pytest.raises(SimulationInvariantError):
        advance_hours(simulation, 1)

    assert simulation.failed
    with pytest.raises(SimulationInvariantError):
        advance_hours(simulation, 1)


def test_regions_advance_independently_in_parallel(scenario_profile, stormy_profile, start):
    regions = {
        "coast": create_simulation(scenario_profile, 1, start),
        "rainforest": create_simulation(stormy_profile, 2, start),
        "plains": create_simulation(scenario_profile, 3, start),
    }

    results = advance_regions(regions, 24, max_workers=3)

    assert results["coast"] == advance_hours(create_simulation(scenario_profile, 1, start), 24)
    assert results["rainforest"] == advance_hours(create_simulation(stormy_profile, 2, start), 24)
    assert results["plains"] == advance_hours(create_simulation(scenario_profile, 3, start), 24)


def test_shared_simulation_instance_is_rejected(scenario_profile):
    simulation = create_simulation(scenario_profile, 1)

    with pytest.raises(InvalidArgumentError):
        advance_regions({"a": simulation, "b": simulation}, 5)


def test_celestial_needs_no_simulation():
    reading = get_celestial(date(2024, 12, 15), "polar")

    assert reading.is_permanent_night
    assert reading.sunrise_time == "--"


def test_numpy_hour_count_is_accepted(scenario_profile, start):
    simulation = create_simulation(scenario_profile, seed=1, start=start)

    assert len(advance_hours(simulation, np.int64(5))) == 5
    assert len(advance_regions({"coast": simulation}, np.int32(2))["coast"]) == 2


def test_dry_spell_is_flagged_as_drought(start):
    desert = resolve_profile("desert", {"storm_frequency": 0.0})
    simulation = create_simulation(desert, seed=4, start=start)

    snapshots = []
    for _ in range(30):
        (snapshot,) = advance_hours(simulation, 1)
        assert snapshot.drought == simulation.tracker.is_drought()
        snapshots.append(snapshot)

    # The initial hour plus 23 advanced hours fill the 24 hour window
    assert not any(snapshot.drought for snapshot in snapshots[:22])
    assert all(snapshot.drought for snapshot in snapshots[22:])
    assert Hazard.DROUGHT in get_hazards(simulation)
    assert "drought" in get_current_snapshot(simulation).to_dict()["hazards"]


def test_snapshot_flags_agree_with_tracker(flat_profile, start):
    # Every hour drizzles once the precipitation threshold is zero
    config = Configuration(precipitation_threshold=0.0, flood_burst_threshold=0.05, flood_day_threshold=100.0)
    steady = replace(flat_profile, storm_frequency=0.0)
    simulation = create_simulation(steady, seed=4, start=start, config=config)

    for _ in range(12):
        (snapshot,) = advance_hours(simulation, 1)
        assert snapshot.flood_risk == simulation.tracker.flood_risk()
        assert snapshot.drought == simulation.tracker.is_drought()

    assert get_current_snapshot(simulation).flood_risk
    assert Hazard.FLOOD in get_hazards(simulation)


def test_restore_synthesizes_nothing_and_logs_once(stormy_profile, start, monkeypatch, caplog):
    original = create_simulation(stormy_profile, seed=17, start=start)
    advance_hours(original, 10)
    state = json.loads(json.dumps(original.export_state()))

    def no_synthesis(*args, **kwargs):
        raise AssertionError("restore must not synthesize weather")

    monkeypatch.setattr("weather_generation.simulation.synthesize_snapshot", no_synthesis)
    with caplog.at_level(logging.INFO, logger="weather_generation.simulation"):
        restored = WeatherSimulation.from_state(state)

    messages = [record.getMessage() for record in caplog.records]
    assert len(messages) == 1
    assert messages[0].startswith("Restored")
    assert get_current_snapshot(restored) == get_current_snapshot(original)
