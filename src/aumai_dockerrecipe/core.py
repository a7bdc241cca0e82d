"""Core logic for aumai-dockerrecipe."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from typing import Any

from .exceptions import RecipeWriteError
from .models import DecodedInstruction, LayerRecord, Region, RuntimeInfo

__all__ = [
    "HistoryDecoder",
    "RecipeSynthesizer",
    "log_trace",
    "save_recipe",
]

logger = logging.getLogger(__name__)

_NOP_PREFIX = "/bin/sh -c #(nop) "
_EXEC_PREFIX = "/bin/sh -c "
_NEW_IMAGE = "# new image"
_DOCKERFILE_NAME = "Dockerfile"

Trace = Callable[[str, Any], None]


def log_trace(stage: str, payload: Any) -> None:
    """Trace collector that forwards decoder state to the module logger."""
    if isinstance(payload, list) and payload and isinstance(payload[0], str):
        logger.debug("%s:\n%s", stage.upper(), "\n".join(payload))
    else:
        logger.debug("%s => %r", stage.upper(), payload)


def _format_run(command: str) -> str:
    """Split a flattened ``&&`` chain back into a multi-line RUN block."""
    if "&&" not in command:
        return "RUN " + command
    parts = [part.strip() for part in command.split("&&")]
    return "RUN " + " && \\\n".join(
        [parts[0]] + ["\t" + part for part in parts[1:]]
    )


def _split_tag(full_tag: str) -> tuple[str, str] | None:
    # Split on the last ':' so registry ports (localhost:5000/app:v1) survive
    if ":" not in full_tag:
        return None
    repository, tag = full_tag.rsplit(":", 1)
    return repository, tag


class HistoryDecoder:
    """
    Rebuilds a Dockerfile-like recipe from an image's flat layer history.

    The engine reports history newest-first; the recipe is emitted in build
    order.  A history may hold several stacked images, delimited only by the
    tagged layer that closes each of them.
    """

    # Ordered (predicate, transform) recognizers; first match wins.
    _RECOGNIZERS: list[tuple[Callable[[str], bool], Callable[[str], str]]] = [
        (lambda raw: not raw, lambda raw: "FROM scratch"),
        (
            lambda raw: raw.startswith(_NOP_PREFIX),
            lambda raw: raw[len(_NOP_PREFIX):],
        ),
        (
            lambda raw: raw.startswith(_EXEC_PREFIX),
            lambda raw: _format_run(raw[len(_EXEC_PREFIX):]),
        ),
    ]

    def __init__(self, trace: Trace | None = None) -> None:
        self._trace = trace

    def decode(self, history: Sequence[LayerRecord]) -> list[str]:
        """Return recipe lines, in build order, for a newest-first *history*."""
        self._emit("history", list(history))
        lines = self.assemble(self.decode_layers(history))
        self._emit("instructions", lines)
        return lines

    def classify(
        self, history: Sequence[LayerRecord]
    ) -> list[tuple[LayerRecord, Region]]:
        """Pair every record with its region, oldest layer first."""
        classified: list[tuple[LayerRecord, Region]] = []
        oldest = len(history) - 1
        for idx in range(oldest, -1, -1):
            record = history[idx]
            if record.tags:
                region = Region.LAST
            elif idx == oldest:
                region = Region.FIRST
            else:
                region = Region.INTERMEDIATE
            classified.append((record, region))
        return classified

    def decode_instruction(self, created_by: str) -> str:
        """Turn one opaque ``created_by`` string into an instruction."""
        inst = created_by
        for matches, transform in self._RECOGNIZERS:
            if matches(created_by):
                inst = transform(created_by)
                break

        if inst.startswith("ENTRYPOINT "):
            inst = inst.replace("&{[", "[").replace("]}", "]")
        return inst

    def decode_layers(
        self, history: Sequence[LayerRecord]
    ) -> list[DecodedInstruction]:
        """Decode every record; one instruction per layer, in build order."""
        decoded: list[DecodedInstruction] = []
        for record, region in self.classify(history):
            image_name = ""
            short_tags: list[str] = []
            full_tags: list[str] = []
            if region is Region.LAST:
                full_tags = list(record.tags)
                first = _split_tag(record.tags[0])
                if first is not None:
                    image_name = first[0]
                for full_tag in full_tags:
                    split = _split_tag(full_tag)
                    if split is not None:
                        short_tags.append(split[1])

            decoded.append(
                DecodedInstruction(
                    command=self.decode_instruction(record.created_by),
                    comment=record.comment,
                    region=region,
                    created_at=record.created,
                    layer_id=record.id,
                    image_name=image_name,
                    short_tags=short_tags,
                    full_tags=full_tags,
                )
            )
        return decoded

    def assemble(self, instructions: Sequence[DecodedInstruction]) -> list[str]:
        """Lay out decoded instructions with image delimiters and summaries."""
        lines: list[str] = []
        final = len(instructions) - 1
        for idx, inst in enumerate(instructions):
            if inst.region is Region.FIRST:
                lines.append(_NEW_IMAGE)

            lines.append(inst.command)
            if inst.comment:
                lines.append("# " + inst.comment)

            if inst.region is Region.LAST:
                lines.append(
                    f"# end of image: {inst.image_name} "
                    f"(id: {inst.layer_id} tags: {','.join(inst.short_tags)})"
                )
                lines.append("")
                if idx < final:
                    lines.append(_NEW_IMAGE)
        return lines

    def _emit(self, stage: str, payload: Any) -> None:
        if self._trace is not None:
            self._trace(stage, payload)


def save_recipe(path: str | Path, lines: Iterable[str]) -> Path:
    """Write recipe *lines* to *path*, newline-separated."""
    target = Path(path)
    try:
        target.write_text("\n".join(lines), encoding="utf-8")
    except OSError as exc:
        raise RecipeWriteError(f"Cannot write recipe to {str(target)!r}: {exc}") from exc
    logger.info("Saved recipe to %s", target)
    return target


def _quote_list(items: Iterable[str]) -> str:
    return "[" + ",".join(json.dumps(item, ensure_ascii=False) for item in items) + "]"


class RecipeSynthesizer:
    """
    Produces a minimal from-scratch recipe for a captured filesystem.

    The captured tree is expected in a ``files`` directory next to the
    generated Dockerfile.
    """

    def synthesize(
        self,
        working_dir: str = "",
        env: Iterable[str] | None = None,
        exposed_ports: Iterable[str] | None = None,
        entrypoint: Sequence[str] | None = None,
        cmd: Sequence[str] | None = None,
    ) -> list[str]:
        """Return the recipe lines for the given runtime metadata."""
        lines = ["FROM scratch", "COPY files /"]

        if working_dir:
            lines.append(f"WORKDIR {working_dir}")

        for entry in env or []:
            key, sep, value = entry.partition("=")
            if sep:
                lines.append(f"ENV {key} {value}")

        for port in sorted(exposed_ports or []):
            lines.append(f"EXPOSE {port}")

        if entrypoint:
            lines.append("ENTRYPOINT " + _quote_list(entrypoint))
        if cmd:
            lines.append("CMD " + _quote_list(cmd))
        return lines

    def synthesize_info(self, info: RuntimeInfo) -> list[str]:
        """Like :meth:`synthesize`, reading fields from a ``RuntimeInfo``."""
        return self.synthesize(
            info.working_dir, info.env, info.exposed_ports, info.entrypoint, info.cmd
        )

    def render(self, *args: Any, **kwargs: Any) -> str:
        """Return the recipe as text, one line per instruction."""
        return "".join(line + "\n" for line in self.synthesize(*args, **kwargs))

    def generate(
        self,
        location: str | Path,
        working_dir: str = "",
        env: Iterable[str] | None = None,
        exposed_ports: Iterable[str] | None = None,
        entrypoint: Sequence[str] | None = None,
        cmd: Sequence[str] | None = None,
    ) -> Path:
        """
        Write ``<location>/Dockerfile`` and return its path.

        Raises ``RecipeWriteError`` when the file cannot be written.
        """
        text = self.render(working_dir, env, exposed_ports, entrypoint, cmd)
        target = Path(location) / _DOCKERFILE_NAME
        try:
            target.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise RecipeWriteError(
                f"Cannot write Dockerfile to {str(target)!r}: {exc}"
            ) from exc
        logger.info("Generated %s", target)
        return target

    def generate_from_info(self, location: str | Path, info: RuntimeInfo) -> Path:
        """Write ``<location>/Dockerfile`` from a ``RuntimeInfo``."""
        return self.generate(
            location,
            info.working_dir,
            info.env,
            info.exposed_ports,
            info.entrypoint,
            info.cmd,
        )
