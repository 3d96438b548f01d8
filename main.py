"""
Review Mining - Product Review Text Analytics

CLI entry point for running the analysis pipeline.
"""

import argparse
import logging
import sys

from review_mining.orchestrator import PipelineOrchestrator
import config.settings as settings


def setup_logging(log_level: str = "INFO"):
    """Configure logging for the entire application."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=settings.LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(settings.LOG_FILE)
        ]
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Review Mining - sentiment, rating classification and topic models",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Analyse the first 5000 reviews of a file
  python main.py --input data/Video_Games_5.json --output-dir output/run1

  # Smaller sample, five topics per subset
  python main.py --input data/Video_Games_5.json.gz \\
                 --max-documents 2000 \\
                 --num-topics 5
        """
    )

    parser.add_argument(
        "--input",
        default=str(settings.DEFAULT_INPUT_PATH),
        help=f"Newline-delimited JSON reviews, optionally .gz (default: {settings.DEFAULT_INPUT_PATH})"
    )

    parser.add_argument(
        "--max-documents",
        type=int,
        default=settings.DEFAULT_MAX_DOCUMENTS,
        help=f"Number of reviews to analyse (default: {settings.DEFAULT_MAX_DOCUMENTS})"
    )

    parser.add_argument(
        "--min-doc-fraction",
        type=float,
        default=settings.MIN_DOC_FRACTION,
        help=f"Drop terms in fewer than this share of documents (default: {settings.MIN_DOC_FRACTION})"
    )

    parser.add_argument(
        "--train-fraction",
        type=float,
        default=settings.TRAIN_FRACTION,
        help=f"Share of documents used for training (default: {settings.TRAIN_FRACTION})"
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=settings.RANDOM_SEED,
        help=f"Random seed (default: {settings.RANDOM_SEED})"
    )

    parser.add_argument(
        "--num-topics",
        type=int,
        default=settings.NUM_TOPICS,
        help=f"Topics per satisfaction subset (default: {settings.NUM_TOPICS})"
    )

    parser.add_argument(
        "--top-n",
        type=int,
        default=settings.TOP_N_TERMS,
        help=f"Terms listed per topic (default: {settings.TOP_N_TERMS})"
    )

    parser.add_argument(
        "--n-estimators",
        type=int,
        default=settings.N_ESTIMATORS,
        help=f"Trees per random forest (default: {settings.N_ESTIMATORS})"
    )

    parser.add_argument(
        "--output-dir",
        default=str(settings.OUTPUT_ROOT),
        help=f"Output directory (default: {settings.OUTPUT_ROOT})"
    )

    parser.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Logging level (default: {settings.LOG_LEVEL})"
    )

    return parser


def print_summary(report, top_n: int) -> None:
    """Print accuracies, warnings and top topic terms."""
    print()
    print("=" * 60)
    print(f"Documents: {report.documents_loaded} loaded, "
          f"{report.documents_after_cleaning} after cleaning")
    print(f"Malformed lines skipped: {report.malformed_lines}")

    for name, evaluation in report.evaluations.items():
        print(f"[{name}] accuracy: {evaluation.accuracy:.3f}")
        for warning in evaluation.warnings:
            print(f"  ! {warning}")

    for subset, model in report.topic_models.items():
        print(f"[{subset}] topics:")
        for topic_id, terms in model.top_terms(top_n).items():
            print(f"  {topic_id}: {', '.join(term for term, _ in terms)}")

    for failure in report.branch_failures:
        print(f"FAILED {failure.branch}: {failure.error_type}: {failure.message}")
    print("=" * 60)


def main():
    """Main CLI entry point."""
    args = build_parser().parse_args()

    # Setup logging
    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    # Print banner
    print("=" * 60)
    print("Review Mining - Product Review Text Analytics")
    print("=" * 60)
    print(f"Input: {args.input}")
    print(f"Documents: {args.max_documents}")
    print(f"Seed: {args.seed}")
    print(f"Topics per subset: {args.num_topics}")
    print("=" * 60)
    print()

    try:
        # Initialize orchestrator
        logger.info("Initializing review mining pipeline...")
        orchestrator = PipelineOrchestrator(
            max_documents=args.max_documents,
            min_doc_fraction=args.min_doc_fraction,
            train_fraction=args.train_fraction,
            seed=args.seed,
            num_topics=args.num_topics,
            top_n_terms=args.top_n,
            n_estimators=args.n_estimators,
            output_dir=args.output_dir
        )

        # Run pipeline
        report = orchestrator.run(args.input)
        print_summary(report, args.top_n)

        if not report.succeeded:
            logger.error(f"{len(report.branch_failures)} branches failed")
            print(f"Outputs for completed branches: {args.output_dir}")
            sys.exit(1)

        print(f"Outputs: {args.output_dir}")
        logger.info("Review mining completed successfully")
        sys.exit(0)

    except KeyboardInterrupt:
        logger.warning("Pipeline interrupted by user")
        print("\nPipeline interrupted")
        sys.exit(1)

    except Exception as e:
        logger.error(f"Pipeline failed: {e}", exc_info=True)
        print(f"\nPipeline failed: {e}")
        print(f"Check {settings.LOG_FILE} for details")
        sys.exit(1)


if __name__ == "__main__":
    main()
