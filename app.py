import streamlit as st
from typing import Dict, List

from salescore.aggregate import aggregate, prepare_context
from salescore.errors import IngestError
from salescore.export import build_export_frame, export_to_excel_bytes, format_decimal_br
from salescore.filters import filter_options
from salescore.metrics_overview import filter_daily_series
from salescore.metrics_rankings import METRIC_LABELS, rank_groups
from salescore.metrics_table import aggregate_for_table
from salescore.session import SalesSession
from salescore.charts import ranking_bar_chart, series_bar_chart, series_line_chart

WEEKDAYS = ["Dom", "Seg", "Ter", "Qua", "Qui", "Sex", "Sáb"]


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


def get_session() -> SalesSession:
    if "sales_session" not in st.session_state:
        st.session_state["sales_session"] = SalesSession()
    return st.session_state["sales_session"]


def format_currency(value: float) -> str:
    return f"R$ {format_decimal_br(value)}"


def format_filter_summary(filters: Dict[str, List[str]]) -> str:
    chips = [f"{k.capitalize()}: {len(v)}" for k, v in filters.items() if v]
    if not chips:
        chips = ["Sem filtros"]
    return "".join([f"<span class='chip'>{txt}</span>" for txt in chips])


def render_ranking(groups: List[dict], label: str, key: str):
    metric = st.selectbox(
        f"Métrica ({label})",
        options=list(METRIC_LABELS.keys()),
        format_func=lambda m: METRIC_LABELS[m],
        key=f"metric_{key}",
    )
    ranked = rank_groups(groups, metric)
    if not ranked:
        st.info("Sem dados para os filtros selecionados.")
        return
    st.vega_lite_chart(ranking_bar_chart(ranked, metric=metric, title=f"{label} · {METRIC_LABELS[metric]}"), use_container_width=True)


# ---------- UI setup ----------
st.set_page_config(page_title="Indicadores de Vendas", layout="wide")
inject_base_styles()
st.title("Indicadores de Vendas")

session = get_session()

upload_gen = st.session_state.get("_upload_gen", 0)
with st.sidebar:
    st.markdown("### Arquivos")
    sales_file = st.file_uploader("Planilha de Vendas", type=["xlsx"], key=f"sales_file_{upload_gen}")
    lookup_file = st.file_uploader("Mapa Loja → Gerente (opcional)", type=["xlsx"], key=f"lookup_file_{upload_gen}")
    if st.button("Limpar dados", disabled=not (session.records or session.lookup)):
        session.clear()
        # new uploader keys drop the files still held by the widgets
        st.session_state["_upload_gen"] = upload_gen + 1
        st.session_state.pop("_sales_loaded", None)
        st.session_state.pop("_lookup_loaded", None)
        st.rerun()

if lookup_file is not None and st.session_state.get("_lookup_loaded") != lookup_file.file_id:
    try:
        updated = session.load_lookup(lookup_file.getvalue())
        st.session_state["_lookup_loaded"] = lookup_file.file_id
        st.success(f"Mapa de gerentes carregado! ({len(session.lookup)} registros, {updated} vendas atualizadas)")
    except IngestError as exc:
        st.error(f"Erro ao ler mapa de gerentes: {exc}")

if sales_file is not None and st.session_state.get("_sales_loaded") != sales_file.file_id:
    try:
        records = session.load_sales(sales_file.getvalue(), source_name=sales_file.name)
        st.session_state["_sales_loaded"] = sales_file.file_id
        st.success(f"{len(records)} registros carregados com sucesso.")
    except IngestError as exc:
        st.error(str(exc))

if not session.records:
    st.info("Carregue sua planilha Excel de vendas para gerar os indicadores.")
    st.stop()

# ----- Sidebar: filters -----
options = filter_options(session.records)
month_labels = {m["value"]: m["label"] for m in options["months"]}
with st.sidebar:
    st.markdown("---")
    st.markdown(f"### Filtros ({len(session.records)} registros)")
    filters = {
        "years": st.multiselect("Ano", options["years"]),
        "months": st.multiselect("Mês", list(month_labels.keys()), format_func=lambda v: month_labels[v]),
        "cities": st.multiselect("Cidade", options["cities"]),
        "stores": st.multiselect("Loja", options["stores"]),
        "managers": st.multiselect("Gerente", options["managers"]),
        "sellers": st.multiselect("Vendedor", options["sellers"]),
        "brands": st.multiselect("Marca", options["brands"]),
        "codes": st.multiselect("Código", options["codes"]),
    }

st.markdown(f"<div class='chip-row'>{format_filter_summary(filters)}</div>", unsafe_allow_html=True)

ctx = prepare_context(filters, session.records)
result = aggregate(ctx["filtered_records"])
summary = result["summary"]

cols = st.columns(5)
cols[0].metric("Vendas Totais", format_currency(summary["total_amount"]))
cols[1].metric("Quantidade de Itens", f"{summary['total_quantity']:,.0f}")
cols[2].metric("Ticket Médio", format_currency(summary["average_ticket"]))
cols[3].metric("Total Cupons", f"{summary['total_coupons']:,}")
cols[4].metric("Itens / Cupom", f"{summary['items_per_coupon']:.2f}")

left, right = st.columns(2)
with left:
    render_ranking(result["by_store"], "Ranking de Lojas", "store")
with right:
    render_ranking(result["by_city"], "Ranking de Cidades", "city")

left, right = st.columns(2)
with left:
    render_ranking(result["by_brand"], "Ranking de Marcas", "brand")
with right:
    render_ranking(result["by_product"], "Ranking de Produtos", "product")

left, right = st.columns(2)
with left:
    if result["by_month"]["ticket"]:
        st.vega_lite_chart(series_bar_chart(result["by_month"]["ticket"], title="Ticket Médio Mensal"), use_container_width=True)
with right:
    if result["by_month"]["revenue"]:
        st.vega_lite_chart(series_line_chart(result["by_month"]["revenue"], title="Evolução de Vendas"), use_container_width=True)

left, right = st.columns(2)
with left:
    render_ranking(result["by_seller"], "Top Vendedores", "seller")
with right:
    day_choice = st.radio("Dia da semana", ["Todos"] + WEEKDAYS, horizontal=True)
    day_of_week = None if day_choice == "Todos" else WEEKDAYS.index(day_choice)
    daily = filter_daily_series(result["by_day"], day_of_week)
    if daily:
        st.vega_lite_chart(series_bar_chart(daily, title="Ticket Médio por Dia"), use_container_width=True)
    else:
        st.info("Sem dados para o dia selecionado.")

st.markdown("### Detalhamento")
table_rows = aggregate_for_table(ctx["filtered_records"])
st.download_button(
    "Exportar Excel",
    data=export_to_excel_bytes(table_rows),
    file_name="indicadores_vendas.xlsx",
    mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
)
st.dataframe(build_export_frame(table_rows), use_container_width=True, hide_index=True)
