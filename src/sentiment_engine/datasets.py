"""
Training data
==============
``BOOTSTRAP_EXAMPLES`` is the small balanced set the orchestrator trains on
when no persisted model is configured.  ``load_training_file`` reads
larger labelled sets for the CLI:

  - ``.json``  – a list of ``{"text": ..., "label": ...}`` objects
  - ``.jsonl`` – one such object per line
  - ``.csv``   – header row with ``text`` and ``label`` columns
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import List, Tuple, Union

from pydantic import ValidationError

from .errors import TrainingError
from .models import TrainingExample

logger = logging.getLogger(__name__)

_POSITIVE = (
    "I love this product, it works perfectly",
    "Absolutely amazing experience, highly recommend",
    "This is the best day ever",
    "Great service and friendly staff",
    "So happy with my purchase today",
    "What a fantastic game last night",
    "The new update is awesome",
    "Thank you so much, you made my day",
    "Brilliant work by the whole team",
    "I really enjoy using this app",
    "Excellent quality and fast delivery",
    "Such a beautiful view this morning",
    "Super excited for the weekend",
    "This movie was wonderful",
    "Best coffee in town, love it",
    "Proud of everyone who helped",
    "Everything went smoothly, great job",
    "Feeling blessed and grateful",
    "The concert was incredible",
    "Nice design and easy to use",
    "Not bad at all, pretty good actually",
    "Can't stop smiling today 😊",
    "Me encanta este producto, es increíble",
    "Excelente servicio, muy feliz",
    "Qué buen día, todo perfecto",
    "J'adore ce film, c'est magnifique",
    "Très bon service, je suis content",
    "Super Qualität, ich bin begeistert",
    "Das ist wirklich toll und schön",
    "Fantastisch, vielen Dank für alles",
)

_NEGATIVE = (
    "I hate this product, it broke immediately",
    "Terrible experience, never again",
    "This is the worst day ever",
    "Awful service and rude staff",
    "So disappointed with my purchase",
    "What a horrible game last night",
    "The new update is garbage",
    "This app keeps crashing, so annoying",
    "Worst customer support I have seen",
    "I really regret buying this",
    "Poor quality and late delivery",
    "Such a sad and depressing news",
    "Feeling angry and frustrated today",
    "This movie was boring and stupid",
    "The food was disgusting",
    "Totally useless, waste of money",
    "Everything went wrong, what a mess",
    "Not good at all, very bad",
    "The concert was a disaster",
    "Ugly design and hard to use",
    "Can't believe how bad this is 😡",
    "I am sick of these delays",
    "Odio este producto, es horrible",
    "Pésimo servicio, muy malo",
    "Qué día tan terrible y triste",
    "Je déteste ce film, c'est nul",
    "Très mauvais service, affreux",
    "Schlechte Qualität, ich bin enttäuscht",
    "Das ist wirklich schrecklich",
    "Furchtbar, nie wieder",
)

_NEUTRAL = (
    "This exists",
    "The meeting is at 3pm tomorrow",
    "I am going to the store",
    "The package arrived today",
    "It is raining outside",
    "The report has ten pages",
    "We are updating the website tonight",
    "The train leaves at noon",
    "Here is the link to the article",
    "I watched the news this morning",
    "The store opens at nine",
    "She is reading a book",
    "The update will be released next week",
    "They moved to a new office",
    "Our team has five members",
    "The event starts on Monday",
    "He ordered a sandwich for lunch",
    "The price is listed on the website",
    "My phone needs charging",
    "The bus was on time",
    "Schedule posted for the conference",
    "Just checking in on the project status",
    "La reunión es mañana a las diez",
    "El paquete llegó hoy",
    "Voy a la tienda",
    "Le train part à midi",
    "La réunion est demain matin",
    "Ich gehe morgen zur Arbeit",
    "Der Bus kommt um acht Uhr",
    "Das Paket ist heute angekommen",
)

BOOTSTRAP_EXAMPLES: Tuple[TrainingExample, ...] = tuple(
    TrainingExample(text=text, label=label)
    for label, texts in (
        ("positive", _POSITIVE),
        ("negative", _NEGATIVE),
        ("neutral", _NEUTRAL),
    )
    for text in texts
)


def bootstrap_examples() -> List[TrainingExample]:
    return list(BOOTSTRAP_EXAMPLES)


def load_training_file(path: Union[str, Path]) -> List[TrainingExample]:
    """Read a labelled dataset from ``.json``, ``.jsonl`` or ``.csv``."""
    path = Path(path)
    if not path.exists():
        raise TrainingError(f"dataset not found: {path}")

    suffix = path.suffix.lower()
    try:
        if suffix == ".json":
            with open(path, "r", encoding="utf-8") as f:
                rows = json.load(f)
            if not isinstance(rows, list):
                raise TrainingError(f"{path.name}: expected a JSON list of objects")
        elif suffix == ".jsonl":
            with open(path, "r", encoding="utf-8") as f:
                rows = [json.loads(line) for line in f if line.strip()]
        elif suffix == ".csv":
            with open(path, "r", encoding="utf-8", newline="") as f:
                reader = csv.DictReader(f)
                if not reader.fieldnames or not {"text", "label"} <= set(reader.fieldnames):
                    raise TrainingError(f"{path.name}: CSV needs 'text' and 'label' columns")
                rows = list(reader)
        else:
            raise TrainingError(f"unsupported dataset format: {suffix or '<none>'}")
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise TrainingError(f"cannot read {path.name}: {e}") from e

    examples: List[TrainingExample] = []
    for i, row in enumerate(rows):
        try:
            examples.append(TrainingExample.model_validate(row))
        except ValidationError as e:
            raise TrainingError(f"{path.name} row {i}: {e.errors()[0]['msg']}") from None

    logger.info("Loaded %d training examples from %s", len(examples), path)
    return examples
