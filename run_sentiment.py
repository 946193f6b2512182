"""
Sentiment Engine Runner
========================
Command-line access to the hybrid sentiment pipeline.

Usage:
  python run_sentiment.py --action train --dataset data/tweets.csv --model models/sentiment_nb.joblib
  python run_sentiment.py --action analyze --text "I love this!" --text "worst day ever"
  python run_sentiment.py --action batch --input tweets.jsonl
  python run_sentiment.py --action stats --model models/sentiment_nb.joblib

Configuration comes from config/default_config.json, .env and the
SENTIMENT_* environment variables (see src/config/config_manager.py).
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from src.config import get_config_manager
from src.sentiment_engine import (
    SentimentEngineError,
    SentimentOrchestrator,
    load_training_file,
)

# ── Logging ──────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    datefmt="%H:%M:%S",
)
log = logging.getLogger("SentimentRunner")

DEFAULT_MODEL_PATH = Path("models") / "sentiment_nb.joblib"


def _dump(payload) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2, default=str))


def _read_items(path: Path):
    if path.suffix.lower() == ".jsonl":
        with open(path, "r", encoding="utf-8") as f:
            return [json.loads(line) for line in f if line.strip()]
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{path.name}: expected a JSON list of tweets")
    return data


# ─────────────────────────────────────────────────────────────────────────────
# Actions
# ─────────────────────────────────────────────────────────────────────────────

async def action_train(engine: SentimentOrchestrator, args) -> None:
    if args.dataset:
        examples = load_training_file(args.dataset)
        if args.incremental:
            stats = engine.partial_train(examples)
        else:
            stats = engine.train(examples)
        log.info("Trained on %d examples", len(examples))
    else:
        log.info("No --dataset given – keeping the bootstrap model")
        stats = engine.model_info()

    target = args.model or engine.settings.model_path or DEFAULT_MODEL_PATH
    meta = engine.save_model(target)
    _dump({"stats": stats, "metadata": meta.model_dump(mode="json", by_alias=True)})


async def action_analyze(engine: SentimentOrchestrator, args) -> None:
    texts = args.text or [line.rstrip("\n") for line in sys.stdin if line.strip()]
    for text in texts:
        result = await engine.analyze(text, language=args.language)
        _dump(result.model_dump(mode="json", by_alias=True))


async def action_batch(engine: SentimentOrchestrator, args) -> None:
    if not args.input:
        raise SystemExit("--input is required for --action batch")
    items = _read_items(Path(args.input))
    results = await engine.analyze_batch(items)
    _dump([r.model_dump(mode="json", by_alias=True) for r in results])
    _dump(engine.get_metrics().model_dump(mode="json", by_alias=True))


async def action_stats(engine: SentimentOrchestrator, args) -> None:
    _dump({
        "model": engine.model_info(),
        "cache": engine.cache_stats(),
        "metrics": engine.get_metrics().model_dump(mode="json", by_alias=True),
    })


ACTIONS = {
    "train": action_train,
    "analyze": action_analyze,
    "batch": action_batch,
    "stats": action_stats,
}


async def run(args) -> int:
    overrides = {}
    if args.model and args.action != "train":
        overrides["model_path"] = str(args.model)
    if args.contextual:
        overrides["contextual"] = {"enabled": True}

    settings = get_config_manager().get_settings(overrides)
    async with SentimentOrchestrator(settings) as engine:
        await ACTIONS[args.action](engine, args)
    return 0


# ─────────────────────────────────────────────────────────────────────────────
# CLI
# ─────────────────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Hybrid Tweet Sentiment Engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_sentiment.py --action train --dataset tweets.csv     # Train + save
  python run_sentiment.py --action analyze --text "love it!"      # One-off analysis
  python run_sentiment.py --action batch --input tweets.jsonl     # Batch of tweets
  python run_sentiment.py --action stats                          # Model & cache stats
        """
    )
    parser.add_argument(
        "--action",
        choices=sorted(ACTIONS),
        default="analyze",
        help="Action to perform"
    )
    parser.add_argument("--text", action="append", help="Text to analyse (repeatable; default: stdin lines)")
    parser.add_argument("--language", default=None, help="Language code (en, es, fr, de or auto)")
    parser.add_argument("--input", default=None, help="JSON / JSONL file of tweets for --action batch")
    parser.add_argument("--dataset", default=None, help="Labelled .json / .jsonl / .csv for --action train")
    parser.add_argument("--model", default=None, help="Model file to load (or write for --action train)")
    parser.add_argument("--incremental", action="store_true", help="Add to the current model instead of retraining")
    parser.add_argument("--contextual", action="store_true", help="Enable the hosted contextual classifier")
    parser.add_argument("--debug", action="store_true", help="Debug logging")

    args = parser.parse_args()
    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        sys.exit(asyncio.run(run(args)))
    except SentimentEngineError as e:
        log.error("%s: %s", e.message, e.detail or "")
        sys.exit(1)
