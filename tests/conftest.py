"""Pytest fixtures for test suite."""

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import pandas as pd  # noqa: E402
import pytest  # noqa: E402

TIMEPOINTS = [0, 4, 8, 12, 16, 20]
REPLICATE_NOISE = [-0.1, 0.0, 0.1]


def rhythmic_values(zt):
    """Strong 24 h rhythm peaking at ZT0."""
    return 5 + 3 * np.cos(2 * np.pi * np.asarray(zt, dtype=float) / 24)


def flat_values(zt):
    """Weak 24 h component buried under an 8 h oscillation of size 1."""
    zt = np.asarray(zt, dtype=float)
    return 5 + 0.2 * np.cos(2 * np.pi * zt / 24) + np.cos(2 * np.pi * 3 * zt / 24)


def _replicate_rows(signal, condition, zt, mean):
    return [
        {"gene": signal, "wavelength": condition, "zt": zt, "replicate": i + 1, "expression": mean + e}
        for i, e in enumerate(REPLICATE_NOISE)
    ]


@pytest.fixture(autouse=True)
def close_figures():
    """Close matplotlib figures created by a test."""
    yield
    plt.close("all")


@pytest.fixture
def gene_expression_df():
    """Two genes x two wavelengths x six timepoints x three replicates.

    per1 is rhythmic under both lights; bmal1 is flat under Red and
    rhythmic under Blue.
    """
    rows = []
    for zt in TIMEPOINTS:
        rows.extend(_replicate_rows("per1", "Blue", zt, rhythmic_values(zt)))
        rows.extend(_replicate_rows("per1", "Red", zt, rhythmic_values(zt)))
        rows.extend(_replicate_rows("bmal1", "Blue", zt, rhythmic_values(zt)))
        rows.extend(_replicate_rows("bmal1", "Red", zt, flat_values(zt)))
    return pd.DataFrame(rows)


@pytest.fixture
def corticosterone_df():
    """Corticosterone samples for three wavelengths; Green has only two ZTs."""
    rows = []
    for condition in ["Blue", "Red"]:
        for zt in TIMEPOINTS:
            for i, e in enumerate(REPLICATE_NOISE):
                rows.append(
                    {"toad_id": f"{condition}{i}", "wavelength": condition, "zt": zt, "cort": rhythmic_values(zt) + e}
                )
    for zt in [0, 12]:
        rows.append({"toad_id": "G1", "wavelength": "Green", "zt": zt, "cort": 4.0})
    return pd.DataFrame(rows)


@pytest.fixture
def behavior_df():
    """Activity falling with wavelength, three days, four toads per light."""
    nm = {"Blue": 470, "Green": 525, "Red": 630}
    base = {"Blue": 20.0, "Green": 15.0, "Red": 5.0}
    noise = [-1.0, -0.5, 0.5, 1.0]
    rows = []
    for condition, wavelength_nm in nm.items():
        for day in [1, 2, 3]:
            for i, e in enumerate(noise):
                rows.append(
                    {
                        "toad_id": f"{condition}{i}",
                        "wavelength": condition,
                        "wavelength_nm": wavelength_nm,
                        "day": day,
                        "activity": base[condition] + e + 0.1 * day,
                    }
                )
    return pd.DataFrame(rows)


@pytest.fixture
def survival_df():
    """Blue toads die early, Red toads mostly survive to day 30."""
    return pd.DataFrame(
        {
            "toad_id": [f"B{i}" for i in range(6)] + [f"R{i}" for i in range(6)],
            "wavelength": ["Blue"] * 6 + ["Red"] * 6,
            "days": [3, 5, 6, 8, 10, 12, 30, 30, 30, 25, 30, 28],
            "died": [1, 1, 1, 1, 1, 0, 0, 0, 0, 1, 0, 1],
        }
    )


@pytest.fixture
def create_data_dir(gene_expression_df, corticosterone_df, behavior_df, survival_df):
    """Factory fixture writing all four datasets into a directory.

    Survival is written as Excel with lab-style headers; the others as CSV.
    """

    def _create(directory, datasets=("behavior", "survival", "gene_expression", "corticosterone")):
        directory.mkdir(parents=True, exist_ok=True)

        if "behavior" in datasets:
            behavior_df.to_csv(directory / "behavior.csv", index=False)
        if "survival" in datasets:
            survival = survival_df.rename(
                columns={"wavelength": "Treatment", "days": "Survival days", "died": "Dead"}
            )
            survival["Dead"] = survival["Dead"].map({1: "yes", 0: "no"})
            survival.to_excel(directory / "survival.xlsx", index=False)
        if "gene_expression" in datasets:
            gene_expression_df.rename(columns={"gene": "Gene ID", "zt": "ZT"}).to_csv(
                directory / "gene_expression.csv", index=False
            )
        if "corticosterone" in datasets:
            corticosterone_df.to_csv(directory / "corticosterone.tsv", sep="\t", index=False)

        return directory

    return _create
