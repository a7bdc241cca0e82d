"""
aumai-dockerrecipe quickstart: working demo of history decoding and recipe synthesis.

Run directly:

    python examples/quickstart.py

No Docker daemon is needed; the history below is what ``docker history``
reports for a small two-image build.
"""

from __future__ import annotations

import pathlib
import tempfile


# ---------------------------------------------------------------------------
# Demo 1: Decode a flat layer history into a recipe
# ---------------------------------------------------------------------------

def demo_decode_history() -> None:
    """Rebuild a Dockerfile from a newest-first layer history."""
    print("\n=== Demo 1: Decode layer history ===")

    from aumai_dockerrecipe.core import HistoryDecoder
    from aumai_dockerrecipe.models import LayerRecord

    history = [
        LayerRecord.model_validate(
            {
                "CreatedBy": '/bin/sh -c #(nop) ENTRYPOINT &{["/usr/bin/app"]}',
                "Created": 1700000500,
                "Id": "sha256:5e1f",
                "Tags": ["myapp:1.2", "myapp:latest"],
            }
        ),
        LayerRecord.model_validate(
            {
                "CreatedBy": "/bin/sh -c apk add --no-cache ca-certificates && "
                "adduser -D app && mkdir -p /data",
                "Created": 1700000400,
                "Id": "<missing>",
            }
        ),
        LayerRecord.model_validate(
            {
                "CreatedBy": '/bin/sh -c #(nop)  CMD ["/bin/sh"]',
                "Created": 1690000000,
                "Id": "sha256:9c6f",
                "Tags": ["alpine:3.18"],
            }
        ),
        LayerRecord.model_validate(
            {
                "CreatedBy": "/bin/sh -c #(nop) ADD file:32ff in / ",
                "Created": 1689999990,
                "Id": "<missing>",
            }
        ),
    ]

    decoder = HistoryDecoder()
    for inst in decoder.decode_layers(history):
        print(f"  [{inst.region.value:<12}] {inst.command.splitlines()[0]}")

    print("\n  Recipe:")
    for line in decoder.decode(history):
        print(f"    {line}")


# ---------------------------------------------------------------------------
# Demo 2: Synthesize a from-scratch recipe for a captured filesystem
# ---------------------------------------------------------------------------

def demo_synthesize() -> None:
    """Write a minimal Dockerfile next to a captured ``files`` tree."""
    print("\n=== Demo 2: Synthesize a recipe ===")

    from aumai_dockerrecipe.core import RecipeSynthesizer
    from aumai_dockerrecipe.models import RuntimeInfo

    info = RuntimeInfo.from_engine_config(
        {
            "WorkingDir": "/opt/service",
            "Env": ["PATH=/usr/local/bin:/usr/bin", "NODE_ENV=production"],
            "ExposedPorts": {"3000/tcp": {}},
            "Entrypoint": ["/bin/sh", "-c", "node /opt/service/server.js"],
            "Cmd": None,
        }
    )

    with tempfile.TemporaryDirectory() as tmp:
        (pathlib.Path(tmp) / "files").mkdir()
        dockerfile = RecipeSynthesizer().generate_from_info(tmp, info)
        print(f"  Wrote {dockerfile.name}:")
        for line in dockerfile.read_text(encoding="utf-8").splitlines():
            print(f"    {line}")


def main() -> None:
    demo_decode_history()
    demo_synthesize()
    print("\nDone.")


if __name__ == "__main__":
    main()
