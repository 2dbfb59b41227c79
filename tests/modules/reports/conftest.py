"""Backend report payloads shared by the report tests (camelCase, as the aggregation API sends them)."""

import pytest

GENERATIONS = [
    {"id": "gen-2015", "name": "Agosto 2015 - Junio 2019", "startYear": "2015", "endYear": "2019"},
    {"id": "gen-2016", "name": "Agosto 2016 - Junio 2020", "startYear": "2016", "endYear": "2020"},
]

CAREERS = [
    {"id": "car-sis", "name": "Ingeniería en Sistemas", "shortName": "Sistemas"},
    {"id": "car-ind", "name": "Ingeniería Industrial", "shortName": "Industrial"},
]


def metadata(denominator: str = "egreso", include_other_value: bool = False) -> dict:
    return {
        "graduationRateDenominator": denominator,
        "includeOtherValue": include_other_value,
        "generatedAt": "2026-10-19T10:00:00Z",
    }


@pytest.fixture
def grouped_payload() -> dict:
    """2 careers x 2 generations, full data, backend percentages left out."""
    return {
        "type": "por-generaciones",
        "tableType": "grouped",
        "metadata": {**metadata(), "careerIds": ["car-sis", "car-ind"]},
        "data": {
            "gen-2015": {
                "car-sis": {"ingreso": 100, "egreso": 80, "titulados": 40},
                "car-ind": {"ingreso": 50, "egreso": 40, "titulados": 10},
                "totales": {"ingreso": 150, "egreso": 120, "titulados": 50},
            },
            "gen-2016": {
                "car-sis": {"ingreso": 90, "egreso": 0, "titulados": 0},
                "car-ind": {"ingreso": 60, "egreso": 30, "titulados": 15, "porcentaje": 50},
                "totales": {"ingreso": 150, "egreso": 30, "titulados": 15},
            },
        },
        "generations": GENERATIONS,
        "careers": CAREERS,
        "grandTotal": {"ingreso": 300, "egreso": 150, "titulados": 65, "porcentaje": 43.33},
    }


@pytest.fixture
def generations_table_payload() -> dict:
    return {
        "type": "por-generaciones",
        "tableType": "table",
        "metadata": metadata("ingreso", include_other_value=True),
        "data": [
            {
                "generationId": "gen-2015",
                "generation": GENERATIONS[0],
                "ingreso": 150,
                "egreso": 120,
                "titulados": 50,
                "porcentaje": 33.333,
            },
            {
                "generationId": "gen-2016",
                "generation": GENERATIONS[1],
                "ingreso": 150,
                "egreso": 30,
                "titulados": 15,
                "porcentaje": 10,
            },
        ],
        "grandTotal": {"ingreso": 300, "egreso": 150, "titulados": 65, "porcentaje": 21.67},
    }


@pytest.fixture
def careers_table_payload() -> dict:
    return {
        "type": "por-carreras",
        "tableType": "table",
        "metadata": metadata("egreso"),
        "data": [
            {
                "careerId": "car-sis",
                "career": CAREERS[0],
                "valuesByGeneration": {"gen-2015": 40, "gen-2016": 0},
                "egreso": 80,
                "titulados": 40,
                "porcentaje": 50,
            },
            {
                "careerId": "car-ind",
                "career": CAREERS[1],
                "valuesByGeneration": {"gen-2016": 15},
                "egreso": 70,
                "titulados": 25,
                "porcentaje": 35.71,
            },
        ],
        "generations": GENERATIONS,
        "grandTotal": {"egreso": 150, "titulados": 65, "porcentaje": 43.33},
    }


@pytest.fixture
def summary_payload() -> dict:
    return {
        "type": "por-generaciones",
        "tableType": "summary",
        "metadata": {**metadata("egreso", include_other_value=True), "dateRange": "general", "careers": "general"},
        "data": {"ingreso": 300, "egreso": 150, "titulados": 65, "porcentaje": 43.33},
    }
