from __future__ import annotations

from datetime import datetime
from io import BytesIO
from typing import Iterable, Sequence

from openpyxl import Workbook

from salescore.data import SaleRecord


def xlsx_bytes(rows: Iterable[Sequence[object]], title: str = "Vendas") -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = title
    for row in rows:
        ws.append(list(row))
    buf = BytesIO()
    wb.save(buf)
    return buf.getvalue()


def make_record(
    idx: int = 0,
    *,
    when: datetime = datetime(2024, 1, 15, 10, 30),
    seller: str = "Ana",
    store: str = "Loja A",
    city: str = "N/A",
    manager: str = "N/A",
    brand: str = "Marca X",
    product: str = "Produto 1",
    code: str = "100",
    coupon: str | None = None,
    amount: float = 10.0,
    quantity: float = 1.0,
) -> SaleRecord:
    return SaleRecord(
        id=f"row-{idx}",
        date=when,
        month=when.month - 1,
        year=when.year,
        seller=seller,
        store=store,
        city=city,
        manager=manager,
        brand=brand,
        product=product,
        code=code,
        coupon=coupon if coupon is not None else f"G-{idx}",
        amount=amount,
        quantity=quantity,
    )


