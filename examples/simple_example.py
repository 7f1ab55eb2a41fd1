#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Simple example script for using the timeFit package
"""

import numpy as np
import pandas as pd
from pathlib import Path

# Import from the timeFit package
from timeFit import (
    TimeFit,
    TimePoint,
    sample_test_data,
    plot_gene_curves,
    plot_class_centers
)

# Set output directory
output_dir = Path("./output")
output_dir.mkdir(exist_ok=True)

print("\n=== Simple timeFit Example ===\n")

print("\n=== METHOD 1: Synthetic data with known classes ===\n")
n_genes = 200
n_experiments = 12
n_classes = 5

data, true_labels = sample_test_data(
    n_genes=n_genes,
    n_experiments=n_experiments,
    n_classes=n_classes,
    random_state=42
)
time_points = np.arange(n_experiments, dtype=float)
print(f"Observation matrix shape: {data.shape}")

fitter = TimeFit(
    n_classes=n_classes,
    init_method='kmeans',
    random_state=42,
    verbose=True
)
results = fitter.fit(data, time_points)

print(f"\nIterations: {results['n_iterations']}, converged: {results['converged']}")
print(f"Noise variance: {results['variance']:.6f}")

# Compare found classes with the generating classes
assignments = fitter.get_class_assignments()
contingency = pd.crosstab(true_labels, assignments['class'],
                          rownames=['true class'], colnames=['fitted class'])
print("\nTrue vs fitted classes:")
print(contingency)

# Evaluate the continuous model between the measurements
curve = fitter.get_gene_model(0)
print(f"\n{curve}")
for t in [0.5, 5.5, 10.5]:
    print(f"  value at t={t}: {curve(t):.4f}")

plot_gene_curves(fitter, save_path=output_dir / "gene_curves.png")
plot_class_centers(fitter, save_path=output_dir / "class_centers.png")

print("\n=== METHOD 2: Genes x experiments table ===\n")
# Irregular sampling with labelled experiments
times = [0.0, 0.5, 1.0, 2.0, 4.0, 6.0, 8.0, 12.0, 16.0]
labels = [f"t{t:g}h" for t in times]
rng = np.random.default_rng(0)
genes = [f"gene_{i}" for i in range(60)]
shapes = np.array([np.sin(np.array(times) / 4), -np.sin(np.array(times) / 4),
                   np.exp(-np.array(times) / 4)])
table = pd.DataFrame(
    shapes[np.arange(60) % 3] + rng.normal(0, 0.05, size=(60, len(times))),
    index=genes,
    columns=labels
)

time_point_list = [TimePoint(t, label, "ratio") for t, label in zip(times, labels)]
fitter = TimeFit(n_classes=3, random_state=0, verbose=True)
fitter.fit(table, time_point_list)

print("\nClass assignments of the first genes:")
print(fitter.get_class_assignments()[['class', 'posterior']].head(9))

print("\nFitted curves on a fine grid:")
grid = np.linspace(times[0], times[-1], 5)
print(pd.DataFrame(fitter.predict(grid)[:, :3], index=grid, columns=genes[:3]))

print("\nExample completed successfully!")
print(f"Plots saved to: {output_dir}")
