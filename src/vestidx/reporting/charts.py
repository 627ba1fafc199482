"""Chart generation using Plotly."""

from typing import List

import plotly.graph_objects as go

from ..engine.units import SCALE
from ..simulation.runner import LedgerSnapshot

THEME = {
    "text": "#e8eaed",
    "text_secondary": "#9aa0a6",
    "grid": "rgba(30, 33, 36, 0.8)",
    "cyan": "#00d4ff",
    "cyan_fill": "rgba(0, 212, 255, 0.12)",
    "amber": "#ffab00",
    "amber_fill": "rgba(255, 171, 0, 0.12)",
    "red": "#ff5252",
    "green": "#00e676",
}


def apply_dark_layout(fig: go.Figure, title: str, x_title: str, y_title: str, showlegend: bool = True) -> None:
    """Apply dark theme layout for charts."""
    fig.update_layout(
        title={
            "text": title,
            "x": 0,
            "xanchor": "left",
            "font": {"size": 11, "color": THEME["text_secondary"], "family": "Inter, -apple-system, sans-serif"}
        },
        xaxis_title=x_title,
        yaxis_title=y_title,
        hovermode="x unified",
        template="plotly_dark",
        height=340,
        margin=dict(l=50, r=20, t=40, b=40),
        showlegend=showlegend,
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="left", x=0, bgcolor="rgba(0,0,0,0)"),
        plot_bgcolor="rgba(8, 9, 10, 1)",
        paper_bgcolor="rgba(8, 9, 10, 1)",
        font={"color": THEME["text"], "family": "Inter, -apple-system, sans-serif", "size": 11},
        xaxis=dict(gridcolor=THEME["grid"], zerolinecolor=THEME["grid"]),
        yaxis=dict(gridcolor=THEME["grid"], zerolinecolor=THEME["grid"]),
    )


def _tokens(value: int) -> float:
    return value / SCALE


def create_fixed_vesting_chart(snapshots: List[LedgerSnapshot]) -> go.Figure:
    """Fixed grants: entitlement, claimed, and redeemable over time."""
    times = [s.t_days for s in snapshots]

    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=times,
        y=[_tokens(s.fixed_entitlement) for s in snapshots],
        name='Entitlement',
        mode='lines',
        line=dict(color=THEME["text_secondary"], width=2, dash='dot')
    ))
    fig.add_trace(go.Scatter(
        x=times,
        y=[_tokens(s.fixed_claimed) for s in snapshots],
        name='Claimed',
        mode='lines',
        line=dict(color=THEME["cyan"], width=2),
        fill='tozeroy',
        fillcolor=THEME["cyan_fill"]
    ))
    fig.add_trace(go.Scatter(
        x=times,
        y=[_tokens(s.fixed_redeemable) for s in snapshots],
        name='Redeemable',
        mode='lines',
        line=dict(color=THEME["amber"], width=2)
    ))
    apply_dark_layout(fig, "Fixed Grants", "Time (days)", "Tokens")
    return fig


def create_share_vesting_chart(snapshots: List[LedgerSnapshot]) -> go.Figure:
    """Supply shares: entitlement, claimed, and redeemable over time."""
    times = [s.t_days for s in snapshots]

    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=times,
        y=[_tokens(s.share_entitlement) for s in snapshots],
        name='Entitlement',
        mode='lines',
        line=dict(color=THEME["text_secondary"], width=2, dash='dot')
    ))
    fig.add_trace(go.Scatter(
        x=times,
        y=[_tokens(s.share_claimed) for s in snapshots],
        name='Claimed',
        mode='lines',
        line=dict(color=THEME["green"], width=2),
        fill='tozeroy',
        fillcolor=THEME["amber_fill"]
    ))
    fig.add_trace(go.Scatter(
        x=times,
        y=[_tokens(s.share_redeemable) for s in snapshots],
        name='Redeemable',
        mode='lines',
        line=dict(color=THEME["amber"], width=2)
    ))
    apply_dark_layout(fig, "Supply Shares", "Time (days)", "Tokens")
    return fig


def create_index_chart(snapshots: List[LedgerSnapshot]) -> go.Figure:
    """Index and claim-token supply over time."""
    times = [s.t_days for s in snapshots]

    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=times,
        y=[s.index / SCALE for s in snapshots],
        name='Index',
        mode='lines',
        line=dict(color=THEME["cyan"], width=2)
    ))
    fig.add_trace(go.Scatter(
        x=times,
        y=[_tokens(s.claim_supply) for s in snapshots],
        name='Claim supply',
        mode='lines',
        yaxis='y2',
        line=dict(color=THEME["red"], width=2, dash='dash')
    ))
    apply_dark_layout(fig, "Index & Supply", "Time (days)", "Index")
    fig.update_layout(yaxis2=dict(title="Tokens", overlaying='y', side='right', showgrid=False))
    return fig
