"""Which metric columns a report shows, and in what order.

Every report shape uses the same rule:

    [other metric, if include_other_value] -> denominator -> titulados -> porcentaje

The `totales` group of the grouped report carries counts only and drops
`porcentaje`.
"""

from typing import Literal

from src.modules.reports.schemas import ReportConfig, SubColumn, TableColumn

TITULADOS = "titulados"
PORCENTAJE = "porcentaje"

LabelStyle = Literal["grouped", "generation", "totals"]

_LABELS: dict[str, dict[str, str]] = {
    "grouped": {
        "ingreso": "INGRESOS",
        "egreso": "EGRESADOS",
        TITULADOS: "TITULADOS",
        PORCENTAJE: "PORCENTAJE",
    },
    "generation": {
        "ingreso": "Ingreso",
        "egreso": "Egreso",
        TITULADOS: "Titulados",
        PORCENTAJE: "%",
    },
    "totals": {
        "ingreso": "TOTAL INGRESOS",
        "egreso": "TOTAL EGRESADOS",
        TITULADOS: "TOTAL TITULADOS",
        PORCENTAJE: "%",
    },
}


def metric_keys_for(config: ReportConfig, totals_only: bool = False) -> list[str]:
    """Ordered metric keys for one column group."""
    keys: list[str] = []
    if config.include_other_value:
        keys.append(config.denominator.other.value)
    keys.append(config.denominator.value)
    keys.append(TITULADOS)
    if not totals_only:
        keys.append(PORCENTAJE)
    return keys


def sub_columns_for(config: ReportConfig, totals_only: bool = False) -> list[SubColumn]:
    """Sub-columns of a grouped-report column group (per career, or `totales` when totals_only)."""
    labels = _LABELS["grouped"]
    return [
        SubColumn(key=key, label=labels[key], align="right")
        for key in metric_keys_for(config, totals_only)
    ]


def table_columns_for(config: ReportConfig, label_style: LabelStyle = "totals") -> list[TableColumn]:
    """Metric columns of a flat table; the rule is applied once, porcentaje always included."""
    labels = _LABELS[label_style]
    return [
        TableColumn(key=key, label=labels[key], align="right")
        for key in metric_keys_for(config, totals_only=False)
    ]
