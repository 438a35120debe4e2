from __future__ import annotations

import pytest


def build_snapshot() -> dict:
    def evaluation(employee: str, day: str, score: int, **extra) -> dict:
        record = {
            "id": f"{employee}-T-1-{day}",
            "employeeId": employee,
            "taskId": "T-1",
            "date": day,
            "score": score,
            "evaluatorId": "admin-1",
        }
        record.update(extra)
        return record

    return {
        "organizations": {
            "acme": {
                "employees": [
                    {"id": "E-A", "name": "Ana", "department": "Vendas", "admissionDate": "2020-02-01"},
                    {"id": "E-B", "name": "Bruno", "department": "RH", "admissionDate": "2021-05-10"},
                    {"id": "E-C", "name": "Carla", "department": "Vendas", "admissionDate": "2024-07-01"},
                    {"id": "E-X", "name": "Xavier", "department": "RH", "isActive": False},
                ],
                "tasks": [
                    {
                        "id": "T-1",
                        "title": "Relatório diário",
                        "periodicity": "specific_dates",
                        "specificDates": ["2024-07-01", "2024-07-02"],
                    }
                ],
                "evaluations": [
                    evaluation("E-A", "2024-06-03", 10),
                    evaluation("E-A", "2024-07-01", 10),
                    evaluation("E-A", "2024-07-02", 0, justification="Não entregue"),
                    evaluation("E-B", "2024-07-01", 10),
                    evaluation("E-B", "2024-07-02", 10),
                    evaluation("E-C", "2024-07-01", 10),
                ],
                "awards": [
                    {
                        "id": "AW-1",
                        "title": "Destaque do Mês",
                        "status": "active",
                        "monetaryValue": 500,
                        "winnerCount": 1,
                    },
                    {
                        "id": "AW-2",
                        "title": "Destaque de Junho",
                        "status": "active",
                        "isRecurring": False,
                        "specificMonth": "2024-06-01",
                        "period": "2024-06",
                    },
                ],
                "challenges": [
                    {
                        "id": "CH-1",
                        "title": "Indicações",
                        "periodStart": "2024-07-01",
                        "periodEnd": "2024-07-31",
                        "points": 50,
                        "status": "scheduled",
                    },
                    {
                        "id": "CH-2",
                        "title": "Treinamento obrigatório",
                        "periodStart": "2024-06-01",
                        "periodEnd": "2024-06-30",
                        "participationType": "Obrigatório",
                        "status": "active",
                    },
                ],
                "bonusConfig": {"baseValue": 200, "zeroLimit": 0},
            },
            "globex": {
                "employees": [{"id": "G-1", "name": "Gil", "department": "TI"}],
            },
        }
    }


@pytest.fixture
def snapshot() -> dict:
    return build_snapshot()
