#!/usr/bin/env python3
"""
Main orchestration script for the attendance insights pipeline.

This script:
1. Reads attendance CSV exports
2. Parses rows into class occurrences
3. Aggregates occurrences to class slot level
4. Builds the working view (saved filter set, search, sort)
5. Calculates headline metrics
6. Ranks top and bottom classes
7. Builds a pivot table and a chart series
8. Exports the working view to CSV
"""

import argparse
import logging
import sys

from attendance_insights.aggregation import aggregate_occurrences
from attendance_insights.charts import project_chart
from attendance_insights.config import Config
from attendance_insights.database import get_supabase_client
from attendance_insights.export import export_summaries
from attendance_insights.filter_sets import SupabaseFilterSetStore
from attendance_insights.filtering import SortKey, apply_view
from attendance_insights.metrics import calculate_metrics
from attendance_insights.parsing import load_csv_rows, parse_rows
from attendance_insights.pivot import build_pivot
from attendance_insights.ranking import RankingOptions, rank_classes

# Configure logging
logging.basicConfig(
    level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Summarize class attendance exports.")
    parser.add_argument("inputs", nargs="+", help="Attendance CSV export(s)")
    parser.add_argument("--output", default="consolidated_data.csv", help="Export CSV path")
    parser.add_argument("--search", default=None, help="Free-text search over summaries")
    parser.add_argument("--filter-set", default=None, help="Saved filter set name (Supabase)")
    parser.add_argument("--sort", action="append", default=[],
                        help="Sort key as FIELD or FIELD:desc (repeatable)")
    parser.add_argument("--pivot-rows", default="day_of_week")
    parser.add_argument("--pivot-columns", default="cleaned_class")
    parser.add_argument("--pivot-value", default="total_checkins")
    parser.add_argument("--aggregation", default="sum")
    parser.add_argument("--chart-group", default="cleaned_class")
    parser.add_argument("--chart-metric", default="total_checkins")
    parser.add_argument("--with-instructors", action="store_true",
                        help="Rank per class slot and instructor")
    return parser.parse_args(argv)


def _sort_keys(specs):
    keys = []
    for spec in specs:
        field, _, direction = spec.partition(":")
        keys.append(SortKey(field, direction or "asc"))
    return keys


def _load_filter_set(name):
    store = SupabaseFilterSetStore(get_supabase_client())
    return store.load(name) or []


def main(argv=None):
    """Main execution function."""
    args = parse_args(argv)

    try:
        logger.info("=" * 60)
        logger.info("Starting Attendance Insights Pipeline")
        logger.info("=" * 60)

        # Step 1: Read exports
        logger.info("\n[Step 1] Reading attendance exports...")
        rows = load_csv_rows(args.inputs)
        logger.info(f"  Raw rows: {len(rows)}")

        # Step 2: Parse
        logger.info("\n[Step 2] Parsing class occurrences...")
        occurrences = parse_rows(rows)

        # Step 3: Aggregate
        logger.info("\n[Step 3] Aggregating to class slot level...")
        summaries = aggregate_occurrences(occurrences)
        logger.info(f"  Class slots: {len(summaries)}")

        # Step 4: Working view
        logger.info("\n[Step 4] Building working view...")
        predicates = _load_filter_set(args.filter_set) if args.filter_set else []
        view = apply_view(
            summaries.values(),
            predicates=predicates,
            sort_keys=_sort_keys(args.sort),
            search_text=args.search,
        )
        logger.info(f"  Summaries in view: {len(view)} ({len(predicates)} filters)")

        # Step 5: Metrics
        logger.info("\n[Step 5] Calculating headline metrics...")
        metrics = calculate_metrics(view)
        for name, value in metrics.as_dict().items():
            logger.info(f"  {name}: {value:.2f}" if isinstance(value, float) else f"  {name}: {value}")

        # Step 6: Rankings
        logger.info("\n[Step 6] Ranking classes by average attendance...")
        ranking = rank_classes(view, RankingOptions(group_by_instructor=args.with_instructors))
        for position, entry in enumerate(ranking.top, start=1):
            logger.info(f"  Top {position}: {entry.key} avg={entry.average_attendance:.1f}")
        for position, entry in enumerate(ranking.bottom, start=1):
            logger.info(f"  Bottom {position}: {entry.key} avg={entry.average_attendance:.1f}")

        # Step 7: Pivot and chart
        logger.info("\n[Step 7] Building pivot table and chart series...")
        pivot = build_pivot(view, args.pivot_rows, args.pivot_columns, args.pivot_value, args.aggregation)
        logger.info("\n" + pivot.to_frame().round(1).to_string())

        for point in project_chart(view, args.chart_group, args.chart_metric):
            logger.info(f"  {point.label}: {point.value:.1f} ({point.count} slots)")

        # Step 8: Export
        logger.info("\n[Step 8] Exporting working view...")
        export_summaries(view, args.output)

        logger.info("\n" + "=" * 60)
        logger.info("Attendance Insights Pipeline Completed Successfully!")
        logger.info("=" * 60)

    except Exception as e:
        logger.error(f"\nPipeline failed with error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
