"""
Streamlit application for the index-adjusted vesting workbench.

Interactive controls for the shared scenario parameters, charts for both
vesting ledgers, the event journal, and exports.

Run locally with: streamlit run streamlit_app.py
"""

import json
import tempfile
from pathlib import Path

import pandas as pd
import streamlit as st

# Import from the vestidx package (installed via pip install -e .)
from vestidx.config.loader import load_config
from vestidx.config.schema import DAY, Config
from vestidx.engine.units import PERCENT_SCALE, SCALE
from vestidx.reporting.charts import (
    create_fixed_vesting_chart,
    create_index_chart,
    create_share_vesting_chart,
)
from vestidx.reporting.export import events_frame, export_json, snapshots_frame
from vestidx.simulation.runner import SimulationRunner
from vestidx.validation.sanity_checks import validate_simulation_results

st.set_page_config(
    page_title="Index Vesting Workbench",
    layout="wide",
    initial_sidebar_state="expanded"
)


@st.cache_data(show_spinner=False)
def _run_simulation_cached(config_dict: dict):
    config = Config.from_dict(config_dict)
    result = SimulationRunner(config).run()
    return result


def render_sidebar(config: Config) -> Config:
    """Sidebar controls; returns the edited config."""
    data = config.to_dict()
    with st.sidebar:
        st.header("Scenario")
        sim = data["simulation"]
        sim["horizon_days"] = st.slider("Horizon (days)", 90, 1460, sim["horizon_days"], step=30)
        sim["timestep_days"] = st.select_slider("Timestep (days)", [1, 7, 14, 30, 60], sim["timestep_days"])
        sim["index_growth_per_step"] = st.number_input(
            "Index growth per step", 0.0, 0.05, sim["index_growth_per_step"], step=0.001, format="%.4f"
        )
        sim["supply_growth_per_step"] = st.number_input(
            "Supply growth per step", 0.0, 0.10, sim["supply_growth_per_step"], step=0.005, format="%.4f"
        )
        sim["claim_probability"] = st.slider("Claim probability", 0.0, 1.0, sim["claim_probability"])
        sim["claim_fraction"] = st.slider("Claim fraction", 0.05, 1.0, sim["claim_fraction"])
        sim["random_seed"] = int(st.number_input("Seed", value=sim["random_seed"], step=1))

        st.header("Shared window")
        share = data["share_schedule"]
        window_days = st.slider(
            "Window length (days)", 30, 1460,
            int((share["full_vest"] - share["vest_start"]) / DAY), step=30
        )
        share["full_vest"] = share["vest_start"] + window_days * DAY
    return Config.from_dict(data)


def render_metrics(result) -> None:
    metrics = result.final_metrics
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Final index", f"{metrics['final_index'] / SCALE:.4f}")
    col2.metric("Fixed claimed", f"{metrics['fixed_claimed_fraction'] * 100:.1f}%")
    col3.metric("Share claimed", f"{metrics['share_claimed_fraction'] * 100:.1f}%")
    col4.metric("Claims", f"{metrics['total_claims']}")


def render_terms(config: Config) -> None:
    grants = pd.DataFrame([
        {"beneficiary": g.beneficiary, "amount": g.amount / SCALE,
         "vest_length_days": (g.vest_length or config.fixed_schedule.default_vest_length) / DAY}
        for g in config.grants
    ])
    shares = pd.DataFrame([
        {"account": t.account, "percent": t.percent / PERCENT_SCALE * 100,
         "max_claim": t.max_claim / SCALE if t.max_claim else None}
        for t in config.share_terms
    ])
    col1, col2 = st.columns(2)
    col1.subheader("Fixed grants")
    col1.dataframe(grants, width="stretch")
    col2.subheader("Supply shares")
    col2.dataframe(shares, width="stretch")


def main():
    st.title("Index Vesting Workbench")
    config = render_sidebar(load_config())
    result = _run_simulation_cached(config.to_dict())

    render_metrics(result)
    for warning in validate_simulation_results(result):
        if warning.severity == "error":
            st.error(f"{warning.message} {warning.details or ''}")
        else:
            st.warning(f"{warning.message} {warning.details or ''}")

    tab_fixed, tab_share, tab_index, tab_terms, tab_events = st.tabs(
        ["Fixed Grants", "Supply Shares", "Index & Supply", "Terms", "Events"]
    )
    with tab_fixed:
        st.plotly_chart(create_fixed_vesting_chart(result.snapshots), width="stretch")
    with tab_share:
        st.plotly_chart(create_share_vesting_chart(result.snapshots), width="stretch")
    with tab_index:
        st.plotly_chart(create_index_chart(result.snapshots), width="stretch")
    with tab_terms:
        render_terms(config)
    with tab_events:
        st.dataframe(events_frame(result), width="stretch")

    st.download_button(
        "Download snapshots (CSV)",
        snapshots_frame(result).to_csv(index=False),
        file_name="vesting_snapshots.csv",
    )
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "results.json"
        export_json(result, str(path))
        st.download_button("Download results (JSON)", path.read_text(), file_name="vesting_results.json")
    with st.expander("Configuration"):
        st.code(json.dumps(config.to_dict(), indent=2), language="json")


main()
