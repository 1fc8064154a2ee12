#!/usr/bin/env python3
"""Example script comparing the weather of several biomes.

This script advances one simulation per biome in parallel and shows how
temperature, precipitation and the moon evolve over a month.
"""

from datetime import datetime

import matplotlib.pyplot as plt
from weather_generation import (
    advance_regions,
    create_simulation,
    forecast_to_dataset,
    resolve_profile,
)


def summarize(name, snapshots):
    """Print a short summary of one region's month.

    Args:
        name: Region name
        snapshots: Hourly snapshots for the region
    """
    temperatures = [s.temperature for s in snapshots]
    rain_hours = sum(1 for s in snapshots if s.precipitation.amount > 0)
    conditions = {}
    for snapshot in snapshots:
        conditions[snapshot.condition.value] = conditions.get(snapshot.condition.value, 0) + 1
    most_common = max(conditions, key=conditions.get)

    print(f"{name:>22}: {min(temperatures):5.1f}°F to {max(temperatures):5.1f}°F, "
          f"{rain_hours:3d} wet hours, mostly {most_common}")


def main():
    """Simulate a month in several biomes."""
    biomes = ["tropical-rainforest", "desert", "temperate-grassland", "boreal-forest", "tundra"]
    start = datetime(2024, 1, 1)

    print("=== Creating regions ===")
    regions = {
        biome: create_simulation(resolve_profile(biome), seed=index, start=start)
        for index, biome in enumerate(biomes)
    }

    print("=== Simulating 30 days ===")
    results = advance_regions(regions, 30 * 24)

    for biome, snapshots in results.items():
        summarize(biome, snapshots)

    fig, axes = plt.subplots(2, 1, figsize=(12, 8), sharex=True)
    for biome, snapshots in results.items():
        forecast = forecast_to_dataset(snapshots, metric=True)
        forecast.temperature.resample(time="1D").mean().plot(ax=axes[0], label=biome)
        forecast.precipitation.resample(time="1D").sum().plot(ax=axes[1], label=biome)

    axes[0].set_title("Daily mean temperature (°C)")
    axes[1].set_title("Daily precipitation (mm)")
    axes[0].legend()

    plt.tight_layout()
    plt.show()


if __name__ == "__main__":
    main()
