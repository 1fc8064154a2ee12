"""Minimal example generating a week of weather for one region.

This script resolves a climate profile for a region, advances a weather
simulation hour by hour and plots the resulting forecast.
"""

from datetime import datetime

import matplotlib.pyplot as plt
from weather_generation import (
    advance_hours,
    create_simulation,
    forecast_to_dataset,
    get_current_snapshot,
    get_hazards,
    resolve_profile,
)


def main():
    """Generate and plot a week of region weather."""
    # Set parameters
    seed = 42
    hours = 7 * 24

    # 1. Resolve the region's climate
    print("Resolving climate profile...")
    profile = resolve_profile("temperate-deciduous", {
        "name": "Greywater Vale",
        "elevation": 1200,
        "special_factors": {"valley": True, "fog": True},
    })
    print(f"Latitude band: {profile.latitude_band}, special factors: {profile.special_factors.enabled()}")

    # 2. Run the simulation
    print("Simulating weather...")
    simulation = create_simulation(profile, seed=seed, start=datetime(2024, 10, 1))
    snapshots = advance_hours(simulation, hours)

    current = get_current_snapshot(simulation)
    print(f"Now: {current.condition.value}, {current.temperature:.0f}°F "
          f"(feels like {current.feels_like:.0f}°F), wind {current.wind_speed:.0f} mph {current.wind_compass}")
    print(f"Sunrise {current.celestial.sunrise_time}, sunset {current.celestial.sunset_time}, "
          f"{current.celestial.moon_phase.value} ({current.celestial.moon_illumination:.0f}%)")
    print(f"Weather systems spawned: {simulation.scheduler.spawn_count}")
    hazards = get_hazards(simulation)
    print(f"Hazards: {', '.join(h.value for h in hazards) if hazards else 'none'}")

    # 3. Visualize the forecast
    print("Visualizing results...")
    forecast = forecast_to_dataset(snapshots)
    fig, axes = plt.subplots(4, 1, figsize=(12, 12), sharex=True)

    forecast.temperature.plot(ax=axes[0], label="Temperature")
    forecast.feels_like.plot(ax=axes[0], label="Feels like", linestyle="--")
    axes[0].set_title("Temperature")
    axes[0].legend()

    forecast.pressure.plot(ax=axes[1], color="purple")
    axes[1].set_title("Pressure")

    forecast.precipitation.plot(ax=axes[2], color="tab:blue")
    axes[2].set_title("Precipitation")

    forecast.wind_speed.plot(ax=axes[3], label="Sustained")
    forecast.wind_gust.plot(ax=axes[3], label="Gust", alpha=0.6)
    axes[3].set_title("Wind")
    axes[3].legend()

    plt.tight_layout()
    plt.show()

    print("Done!")


if __name__ == "__main__":
    main()
