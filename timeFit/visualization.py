#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Visualization functions for the timeFit package.

This module contains the plots of a fitted TimeFit model: the continuous
curves of single genes against their measurements, and the class centres
together with the class sizes.
"""

from typing import Any, List, Optional, Tuple

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.figure import Figure

# Class colour cycle
CLASS_COLORS = plt.cm.tab20.colors


def _check_fitted(fitter: Any):
    if getattr(fitter, 'state', None) is None:
        raise ValueError("No model results available in fitter.")


def plot_gene_curves(
    fitter: Any,  # TimeFit instance
    gene_indices: Optional[List[int]] = None,
    n_points: int = 100,
    figsize: Tuple[int, int] = (16, 12),
    save_path: Optional[str] = None
) -> Figure:
    """
    Plot the continuous model of genes against their measured values.

    Parameters
    ----------
    fitter : TimeFit
        Fitted TimeFit instance
    gene_indices : list of int, optional
        Indices (or names) of genes to plot. If None, plots up to 9 genes
        spread over the classes.
    n_points : int, default=100
        Number of points at which each curve is evaluated
    figsize : tuple, default=(16, 12)
        Figure size
    save_path : str, optional
        Path to save the figure. If None, the figure is not saved.

    Returns
    -------
    matplotlib.figure.Figure
        Matplotlib figure
    """
    _check_fitted(fitter)

    if gene_indices is None:
        # Take genes round-robin from the classes so that each class shows up
        class2genes = [genes for genes in fitter.state.class2genes() if len(genes)]
        gene_indices = []
        depth = 0
        while len(gene_indices) < 9 and any(depth < len(genes) for genes in class2genes):
            gene_indices.extend(int(genes[depth]) for genes in class2genes if depth < len(genes))
            depth += 1
        gene_indices = gene_indices[:9]

    # Create figure
    n_rows = max(int(np.ceil(len(gene_indices) / 3)), 1)
    fig, axes = plt.subplots(n_rows, 3, figsize=figsize, squeeze=False)

    for i, gene in enumerate(gene_indices):
        ax = axes[i // 3][i % 3]
        curve = fitter.get_gene_model(gene)
        times, values = curve.sample(n_points)
        color = CLASS_COLORS[curve.gene_class % len(CLASS_COLORS)]

        ax.scatter(curve.time_points, curve.observations, s=30, alpha=0.7,
                   c=[color], label='Measured')
        ax.plot(times, values, '-', linewidth=2, color=color, label='Fitted')
        ax.scatter(curve.control_points, curve(curve.control_points), marker='x',
                   s=40, c='k', label='Control points')

        ax.set_title(f"Gene: {curve.gene_name}\nClass {curve.gene_class}")
        ax.set_xlabel("Time")
        ax.set_ylabel("Expression")
        ax.grid(alpha=0.3)
        if i == 0:
            ax.legend(loc='best')

    # Hide unused subplots
    for i in range(len(gene_indices), n_rows * 3):
        axes[i // 3][i % 3].set_visible(False)

    plt.suptitle("Continuous Gene Expression Curves")
    plt.tight_layout(rect=[0, 0.03, 1, 0.97])

    # Save figure if requested
    if save_path:
        plt.savefig(save_path, dpi=300, bbox_inches='tight')
        print(f"Figure saved to {save_path}")

    return fig


def plot_class_centers(
    fitter: Any,  # TimeFit instance
    n_points: int = 100,
    figsize: Tuple[int, int] = (12, 5),
    save_path: Optional[str] = None
) -> Figure:
    """
    Plot the class centre curves and the number of genes per class.

    Parameters
    ----------
    fitter : TimeFit
        Fitted TimeFit instance
    n_points : int, default=100
        Number of points at which each centre curve is evaluated
    figsize : tuple, default=(12, 5)
        Figure size
    save_path : str, optional
        Path to save the figure. If None, the figure is not saved.

    Returns
    -------
    matplotlib.figure.Figure
        Matplotlib figure
    """
    _check_fitted(fitter)

    n_classes = fitter.state.n_classes
    times = np.linspace(fitter.control_points[0], fitter.control_points[-1], n_points)
    centers = fitter.class_center_curves(times)

    fig, axes = plt.subplots(1, 2, figsize=figsize)

    # Plot class centers
    ax = axes[0]
    for j in range(n_classes):
        ax.plot(times, centers[:, j], color=CLASS_COLORS[j % len(CLASS_COLORS)],
                label=f'Class {j}')

    ax.set_title(f"Class Centers (n={n_classes})")
    ax.set_xlabel("Time")
    ax.set_ylabel("Expression")
    if n_classes <= 10:
        ax.legend()
    ax.grid(alpha=0.3)

    # Plot class sizes
    ax = axes[1]
    class_sizes = np.bincount(fitter.state.gene2class, minlength=n_classes)
    bars = ax.bar(range(n_classes), class_sizes,
                  color=[CLASS_COLORS[j % len(CLASS_COLORS)] for j in range(n_classes)])

    # Add count labels on bars
    for bar, count in zip(bars, class_sizes):
        ax.text(
            bar.get_x() + bar.get_width() / 2,
            bar.get_height(),
            f'{count}',
            ha='center',
            va='bottom'
        )

    ax.set_title("Class Sizes")
    ax.set_xlabel("Class")
    ax.set_ylabel("Number of Genes")
    ax.set_xticks(range(n_classes))

    plt.tight_layout()

    # Save figure if requested
    if save_path:
        plt.savefig(save_path, dpi=300, bbox_inches='tight')
        print(f"Figure saved to {save_path}")

    return fig
