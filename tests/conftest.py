from __future__ import annotations

from datetime import datetime

import pytest

from tests.helpers import xlsx_bytes


@pytest.fixture
def pos_export_bytes() -> bytes:
    """A POS export using the positional Descrição aliases."""
    return xlsx_bytes(
        [
            ["Data", "Descrição", "Descrição2", "Descrição3", "Item", "Marca", "Valor Total", "Qtd", "Cupom"],
            [datetime(2024, 1, 15, 10, 0), "Loja A", "Ana", "Camisa", 1001, "Marca X", 100.0, 2, "C1"],
            [datetime(2024, 1, 15, 11, 0), "loja  a", "Ana", "Calça", 1002, "Marca Y", 50.0, 1, "C1"],
            [datetime(2024, 1, 16, 9, 0), "Loja B", "Bruno", "Camisa", 1001, "Marca X", 80.0, 3, "C2"],
            ["sem data", "Loja B", "Bruno", "Meia", 1003, "Marca Z", 5.0, 1, "C3"],
        ]
    )


@pytest.fixture
def lookup_bytes() -> bytes:
    return xlsx_bytes(
        [
            ["Relatório de Gerentes"],
            [],
            ["Loja", "Gerente", "Cidade"],
            ["LOJA A", "Maria", "São Paulo"],
            ["Loja Nórte", "Carlos", None],
        ],
        title="Gerentes",
    )
