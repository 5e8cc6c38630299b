import logging
import os

import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns
from sklearn.base import clone
from sklearn.metrics import accuracy_score, precision_score, recall_score, f1_score
from sklearn.model_selection import StratifiedKFold


def plot_weight_matrices(V, display=True, title=None, save_path=None):
    """
    Plots the weight matrix W as a heatmap and the translation t as a column heatmap.

    Parameters:
    - V: numpy.ndarray
        The augmented weight matrix [t; W] of shape (m+1, K-1).
    - display: bool
        Whether to display the plot.
    - title: str
        The title for the plot.
    - save_path: str
        Path to save the plot, if provided.

    Returns:
    - fig: matplotlib.figure.Figure
    """
    V = np.asarray(V)
    W_abs = np.abs(V[1:])
    t_abs = np.abs(V[:1]).T  # Shape: (K-1, 1)

    fig, axes = plt.subplots(1, 2, figsize=(12, 8), gridspec_kw={'width_ratios': [9, 1]})

    cmap = 'Greys'

    # Annotate small matrices only
    annot = W_abs.shape[0] <= 20 and W_abs.shape[1] <= 20

    sns.heatmap(
        W_abs,
        cmap=cmap,
        annot=annot,
        fmt=".2f",
        cbar_kws={"shrink": .8},
        linewidths=.5,
        vmin=0,
        vmax=np.max(W_abs) if np.max(W_abs) != 0 else 1,
        ax=axes[0]
    )
    axes[0].set_title("W", fontsize=14)
    axes[0].set_xlabel("Simplex dimensions")
    axes[0].set_ylabel("Features")

    sns.heatmap(
        t_abs,
        cmap=cmap,
        annot=annot,
        fmt=".2f",
        cbar_kws={"shrink": .8},
        linewidths=.5,
        vmin=0,
        vmax=np.max(t_abs) if np.max(t_abs) != 0 else 1,
        ax=axes[1]
    )
    axes[1].set_title("t", fontsize=14)
    axes[1].set_xlabel("")
    axes[1].set_ylabel("Simplex dimensions")

    if title is not None:
        fig.suptitle(title, fontsize=16, y=1.02)

    plt.tight_layout()

    if save_path is not None:
        plt.savefig(save_path, bbox_inches='tight')

    if display:
        plt.show()

    return fig


def log_eval_stats(X, y, estimator, n_splits=5, random_state=4):
    """
    Log the mean and standard deviation of the test metrics of an estimator
    over stratified folds, for fixed hyperparameters.

    Returns a dict mapping metric name to the list of per-fold scores.
    """
    logging.info("------------EVAL STATS------------")
    cv = StratifiedKFold(n_splits=n_splits, shuffle=True, random_state=random_state)
    scores = {'accuracy': [], 'precision': [], 'recall': [], 'f1': []}

    for train_index, test_index in cv.split(X, y):
        X_train, y_train = X[train_index], y[train_index]
        X_test, y_test = X[test_index], y[test_index]

        model = clone(estimator).fit(X_train, y_train)

        y_pred = model.predict(X_test)
        scores['accuracy'].append(accuracy_score(y_test, y_pred))
        scores['precision'].append(precision_score(y_test, y_pred, average='weighted', zero_division=0))
        scores['recall'].append(recall_score(y_test, y_pred, average='weighted', zero_division=0))
        scores['f1'].append(f1_score(y_test, y_pred, average='weighted', zero_division=0))

    for name, values in scores.items():
        logging.info(f"Mean test {name}: {np.mean(values):.4f} ± {np.std(values):.4f}")

    return scores


def setup_logging(log_file="experiment.log", level=logging.INFO):
    """
    Sets up logging to write messages to a file and to the console.

    Parameters:
    - log_file: str, path to the log file.
    - level: logging level (e.g., logging.INFO, logging.DEBUG).
    """
    # Remove any existing handlers to reset logging configuration
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)

    logging.basicConfig(
        filename=log_file,
        filemode='w',
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s"
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
    console_handler.setFormatter(formatter)
    logging.getLogger().addHandler(console_handler)

    # Let the training progress of the package through at the same level
    logging.getLogger('majsvm').setLevel(level)

    logging.info("Logging initialized. Writing to %s", os.path.abspath(log_file))
