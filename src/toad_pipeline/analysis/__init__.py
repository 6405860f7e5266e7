"""Analysis module for the toad light-wavelength pilot study.

Provides cosinor rhythm fitting, standard statistical tests, survival
analysis, plotting and the report driver.

Example:
    from toad_pipeline import load_gene_expression, to_observations
    from toad_pipeline.analysis import (
        fit_rhythms,
        rhythms_to_frame,
        summarize_timepoints,
    )

    df = load_gene_expression("data/gene_expression.csv")
    observations = to_observations(df, "expression")

    summary = summarize_timepoints(observations)
    fits = fit_rhythms(summary)
    table = rhythms_to_frame(fits)
"""

from .plots import (
    plot_group_means,
    plot_regression,
    plot_rhythm,
    plot_rhythm_grid,
    plot_survival_curves,
)
from .pub_plots import (
    apply_publication_style,
    create_figure,
    format_p_value,
    save_figure,
)
from .report import (
    analyze_behavior,
    analyze_corticosterone,
    analyze_gene_expression,
    analyze_rhythms,
    analyze_survival,
    generate_report,
    write_markdown_summary,
)
from .rhythm import (
    CosineFit,
    classify_amplitude_ci,
    cosine_model,
    count_classifications,
    fit_group,
    fit_observation_rhythms,
    fit_rhythms,
    format_rhythm_status,
    predict_curve,
    rhythms_to_frame,
    summarize_timepoints,
)
from .stats import (
    compact_letter_display,
    compute_confidence_interval,
    describe_by_group,
    fit_linear_model,
    normality_test,
    regress_on_wavelength,
    significance_stars,
    tukey_hsd,
    tukey_letters,
    two_way_anova,
)
from .survival import (
    fit_kaplan_meier,
    logrank_multivariate,
    logrank_pairwise,
    prepare_survival_data,
    survival_summary,
)

__all__ = [
    # rhythm
    "CosineFit",
    "summarize_timepoints",
    "cosine_model",
    "classify_amplitude_ci",
    "fit_group",
    "fit_rhythms",
    "fit_observation_rhythms",
    "rhythms_to_frame",
    "format_rhythm_status",
    "count_classifications",
    "predict_curve",
    # stats
    "describe_by_group",
    "compute_confidence_interval",
    "normality_test",
    "significance_stars",
    "fit_linear_model",
    "regress_on_wavelength",
    "two_way_anova",
    "tukey_hsd",
    "compact_letter_display",
    "tukey_letters",
    # survival
    "prepare_survival_data",
    "fit_kaplan_meier",
    "survival_summary",
    "logrank_pairwise",
    "logrank_multivariate",
    # plots
    "plot_rhythm",
    "plot_rhythm_grid",
    "plot_survival_curves",
    "plot_group_means",
    "plot_regression",
    "apply_publication_style",
    "create_figure",
    "save_figure",
    "format_p_value",
    # report
    "analyze_rhythms",
    "analyze_behavior",
    "analyze_survival",
    "analyze_gene_expression",
    "analyze_corticosterone",
    "write_markdown_summary",
    "generate_report",
]
