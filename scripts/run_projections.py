# scripts/run_projections.py
from __future__ import annotations

import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).resolve().parents[1]
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import argparse
import logging

import pandas as pd

from startup_proj.normalize import prepare_inputs
from startup_proj.projections import calculate_projections
from startup_proj.report import cash_frame, compare_scenarios, projections_to_frame, save_outputs
from startup_proj.scenarios import DEFAULT_MARKET_SIZING, DEFAULT_SETTINGS, SCENARIOS
from startup_proj.valuation import calculate_dcf

DEFAULT_OUT_DIR = Path("outputs/tables")


def run_all_scenarios(normalize: bool = True) -> dict:
    """
    Project every built-in scenario over the default settings.
    Returns {table_name: DataFrame} ready for save_outputs.
    """
    frames = {}
    for name, params in SCENARIOS.items():
        scenario, settings, market = params, DEFAULT_SETTINGS, DEFAULT_MARKET_SIZING
        if normalize:
            scenario, settings, market = prepare_inputs(scenario, settings, market)

        rows = calculate_projections(scenario, settings, market)
        dcf = calculate_dcf(rows, settings.discount_rate, settings.terminal_growth)

        print(f"\n--- {name.upper()} | P&L and cash flow ---")
        df = projections_to_frame(rows)
        print(df[["year", "users", "total_revenue", "ebitda", "net_income", "free_cash_flow"]].to_string(index=False))
        print(f"Enterprise value (DCF): {dcf.enterprise_value:,.0f}")

        frames[f"projections_{name}"] = df
        frames[f"cash_{name}"] = cash_frame(rows)

    compare = compare_scenarios(SCENARIOS, DEFAULT_SETTINGS, DEFAULT_MARKET_SIZING)
    print("\n=== SCENARIO COMPARISON ===")
    print(compare[["scenario", "last_year_revenue", "enterprise_value", "funding_need", "break_even_year"]]
          .to_string(index=False))
    frames["scenario_compare"] = compare
    return frames


def main() -> None:
    parser = argparse.ArgumentParser(description="Project all built-in scenarios and save CSV tables.")
    parser.add_argument(
        "--out-dir",
        default=str(DEFAULT_OUT_DIR),
        help="Output directory (relative to repo root).",
    )
    parser.add_argument(
        "--raw",
        action="store_true",
        help="Skip input normalization and feed the assumptions to the engine as-is.",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    pd.set_option("display.width", 160)

    out_dir = Path(args.out_dir)
    if not out_dir.is_absolute():
        out_dir = (project_root / out_dir).resolve()

    print("\nProjecting scenarios...")
    frames = run_all_scenarios(normalize=not args.raw)
    written = save_outputs(frames, out_dir)

    print("\nSaved outputs to:")
    for path in written.values():
        print(f"  {path}")


if __name__ == "__main__":
    main()
