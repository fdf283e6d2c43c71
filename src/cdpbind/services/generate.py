"""GenerateService: compile the protocol and write the generated package."""

from __future__ import annotations

from pathlib import Path

from cdpbind.compiler.render import PackageRenderer
from cdpbind.errors import CdpBindError
from cdpbind.services.base import BaseService, failure
from cdpbind.services.result import ServiceResult
from cdpbind.services.telemetry import trace_span, traced


class GenerateService(BaseService):
    """Writes ``<output_dir>/<package>/``."""

    @traced
    def generate(
        self,
        browser: Path | None = None,
        js: Path | None = None,
        *,
        output_dir: Path | None = None,
        package: str | None = None,
    ) -> ServiceResult:
        """Compile both schema halves and render them under *output_dir*.

        Nothing is written unless every phase succeeds, including the
        syntax check of each rendered module.
        """
        cfg = self._settings.generate
        out = self._settings.resolve(output_dir or cfg.output_dir)
        template_dir = self._settings.resolve(cfg.template_dir) if cfg.template_dir else None

        try:
            compiled = self._compile(browser, js, package=package)
            renderer = PackageRenderer(compiled, template_dir=template_dir)
            with trace_span("render") as span:
                written = renderer.write(out)
                if span:
                    span.annotate("files", len(written))
        except CdpBindError as exc:
            return failure("generate", exc)

        return ServiceResult(
            ok=True,
            op="generate",
            data={
                "package": compiled.package,
                "version": str(compiled.definition.version),
                "output_dir": str(out),
                "files": [str(p) for p in written],
                "count": len(written),
                "declarations": len(compiled.table),
            },
        )
