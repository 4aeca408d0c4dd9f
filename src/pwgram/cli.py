"""
Command-line entry point.

    pwgram train corpus.txt -m th qu ch > english.pwgram
    pwgram generate english.pwgram -e 64 -n 5
    pwgram inspect english.pwgram --plot entropy.png

Corpus and model default to stdin when no path is given.
"""

from __future__ import annotations

import argparse
import itertools
from pathlib import Path
import sys
from typing import Iterable, Optional, Sequence

from loguru import logger

from .bigram import BigramModel, ModelDecodeError, State
from .config import configure_logging, get_settings
from .entropy import EntropyEstimator
from .passwords import PasswordGenerator
from .qtable import CollisionPolicy
from .randomness import BytePool
from .tokenize import Tokenizer
from .train import DEFAULT_DELIMITERS, train


def _read_input(path: Optional[str]) -> str:
    if path is None or path == "-":
        return sys.stdin.read()
    return Path(path).expanduser().read_text(encoding="utf-8")


def _load_model(path: Optional[str]) -> BigramModel:
    return BigramModel.loads(_read_input(path))


def _cmd_train(args: argparse.Namespace) -> int:
    settings = get_settings()
    corpus = _read_input(args.corpus)
    multigraphs = [*settings.multigraphs, *args.multigraphs]
    delimiters = {*DEFAULT_DELIMITERS, *settings.delimiters, *args.delimiters}
    collision = CollisionPolicy(args.collision or settings.collision)

    logger.info(
        "training on {} chars with {} multigraphs and {} delimiters",
        len(corpus),
        len(multigraphs),
        len(delimiters),
    )
    model = train(Tokenizer(corpus, multigraphs), delimiters, collision)
    encoded = model.dumps()

    if args.output:
        Path(args.output).expanduser().write_text(encoded + "\n", encoding="utf-8")
        logger.info("model written to {}", args.output)
    else:
        print(encoded)
    return 0


def _make_pool(seed: Optional[int]) -> Optional[BytePool]:
    if seed is None:
        return None
    return BytePool(refill_size=get_settings().refill_size, seed=seed)


def _cmd_generate(args: argparse.Namespace) -> int:
    settings = get_settings()
    model = _load_model(args.model)
    if args.count < 0:
        raise ValueError("--count must be non-negative")

    gen = PasswordGenerator(
        model,
        min_entropy=settings.min_entropy if args.entropy is None else args.entropy,
        pool=_make_pool(args.seed),
        max_tokens=settings.max_tokens,
        collision=CollisionPolicy(settings.collision),
    )
    if model.is_empty:
        logger.warning("model has no transitions; passwords will be empty")

    for _ in range(args.count):
        result = gen.password_with_entropy()
        if args.show_entropy:
            print(f"{result.password}\t{result.entropy_bits:.2f}")
        else:
            print(result.password)
    return 0


def _steps_to_target(model: BigramModel, target: float, cap: int) -> Optional[int]:
    if model.is_empty:
        return None
    total = 0.0
    for step, bits in enumerate(itertools.islice(EntropyEstimator(model), cap), start=1):
        total += bits
        if total >= target:
            return step
    return None


def _cmd_inspect(args: argparse.Namespace) -> int:
    settings = get_settings()
    model = _load_model(args.model)
    target = settings.min_entropy if args.entropy is None else args.entropy
    if args.steps <= 0:
        raise ValueError("--steps must be positive")

    per_state = [model[state].entropy() for state in model]
    per_step = list(itertools.islice(EntropyEstimator(model), args.steps))
    needed = _steps_to_target(model, target, settings.max_tokens)

    print(f"states:            {len(model)}")
    print(f"transitions:       {sum(len(model[state]) for state in model)}")
    print(f"tokens:            {len(model.tokens())}")
    print(f"absorbing states:  {len(model.absorbing_states())}")
    print(f"start transitions: {len(model.transitions_from(State.START))}")
    mean = sum(per_state) / len(per_state) if per_state else 0.0
    print(f"mean state bits:   {mean:.3f}")
    print("step bits:         " + " ".join(f"{bits:.2f}" for bits in per_step))
    print(f"steps to {target:g} bits: {needed if needed is not None else 'unreachable'}")

    if args.plot:
        from . import viz
        import matplotlib.pyplot as plt

        fig, _ = viz.plot_entropy_curve(per_step, target=target)
        fig.savefig(args.plot)
        plt.close(fig)
        logger.info("entropy plot written to {}", args.plot)
    return 0


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="pwgram",
        description="Train bigram models on a wordlist and generate pronounceable passwords",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log more (-v info, -vv debug)",
    )
    parser.add_argument("--log-level", default=None, help="Explicit loguru level")
    sub = parser.add_subparsers(dest="command", required=True)

    p_train = sub.add_parser(
        "train",
        help="Train a model and print it to stdout",
        description=(
            "Train a bigram model on a wordlist. The wordlist may be a file or"
            " stdin; newline is always a delimiter."
        ),
    )
    p_train.add_argument("corpus", nargs="?", help="Training corpus (default: stdin)")
    p_train.add_argument(
        "-m",
        "--multigraphs",
        nargs="+",
        action="extend",
        default=[],
        help="Multigraphs to keep as single tokens, e.g. -m th qu ch",
    )
    p_train.add_argument(
        "-d",
        "--delimiters",
        nargs="+",
        action="extend",
        default=[],
        help="Extra tokens that break the chain (newline always does)",
    )
    p_train.add_argument(
        "--collision",
        choices=[policy.value for policy in CollisionPolicy],
        default=None,
        help="How outcomes that quantize to the same key are resolved",
    )
    p_train.add_argument("-o", "--output", help="Write the model here instead of stdout")
    p_train.set_defaults(func=_cmd_train)

    p_gen = sub.add_parser(
        "generate",
        help="Generate passwords from a model",
        description="Generate passwords from a model file (or stdin).",
    )
    p_gen.add_argument("model", nargs="?", help="Encoded model (default: stdin)")
    p_gen.add_argument("-e", "--entropy", type=float, default=None, help="Minimum bits per password")
    p_gen.add_argument("-n", "--count", type=int, default=1, help="Number of passwords")
    p_gen.add_argument("--seed", type=int, default=None, help="Seed for reproducible output")
    p_gen.add_argument(
        "--show-entropy",
        action="store_true",
        help="Print each password's entropy after a tab",
    )
    p_gen.set_defaults(func=_cmd_generate)

    p_inspect = sub.add_parser(
        "inspect",
        help="Summarize a model's structure and entropy rate",
    )
    p_inspect.add_argument("model", nargs="?", help="Encoded model (default: stdin)")
    p_inspect.add_argument("--steps", type=int, default=10, help="Estimator steps to show")
    p_inspect.add_argument("-e", "--entropy", type=float, default=None, help="Target bits")
    p_inspect.add_argument("--plot", type=Path, default=None, help="Save an entropy plot here")
    p_inspect.set_defaults(func=_cmd_inspect)

    return parser.parse_args(argv)


def _log_level(args: argparse.Namespace) -> Optional[str]:
    if args.log_level:
        return args.log_level
    if args.verbose >= 2:
        return "DEBUG"
    if args.verbose == 1:
        return "INFO"
    return None


def main(argv: Optional[Iterable[str]] = None) -> int:
    args = _parse_args(list(argv) if argv is not None else None)
    try:
        configure_logging(_log_level(args))
        return args.func(args)
    except (OSError, ModelDecodeError, ValueError) as exc:
        print(f"pwgram: error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
