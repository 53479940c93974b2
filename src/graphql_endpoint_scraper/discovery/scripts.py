"""JavaScript evaluated inside the target page.

Every builder returns a self-contained expression for ``Runtime.evaluate``.
Values interpolated into the source go through ``json.dumps``.
"""

import json

DOCUMENT_READY_JS = "document.readyState !== 'loading'"


def build_fetch_text_js(url: str, timeout: float | None = None) -> str:
    """fetch() ``url`` from the page and resolve to ``{ok, status, body|error}``."""
    timeout_ms = int(timeout * 1000) if timeout else 0
    return f"""
(async () => {{
    const controller = new AbortController();
    const timer = {timeout_ms} > 0 ? setTimeout(() => controller.abort(), {timeout_ms}) : null;
    try {{
        const response = await fetch({json.dumps(url)}, {{ signal: controller.signal }});
        const body = await response.text();
        return {{ ok: response.ok, status: response.status, body: body }};
    }} catch (error) {{
        return {{ ok: false, status: 0, error: error.message || String(error) }};
    }} finally {{
        if (timer) clearTimeout(timer);
    }}
}})()
"""


def build_registry_ready_js(registry: str) -> str:
    """True once the webpack chunk registry holds at least one chunk."""
    return f"((window[{json.dumps(registry)}] || []).length > 0)"


def build_chunk_source_js(registry: str) -> str:
    """Concatenate the source of every module factory in the chunk registry.

    Each registry entry is ``[chunkIds, {moduleId: factory}, runtime?]``;
    entries without a module map are skipped.
    """
    return f"""
(() => {{
    const chunks = window[{json.dumps(registry)}] || [];
    return Array.from(chunks)
        .filter((chunk) => chunk && chunk[1])
        .flatMap((chunk) => Object.values(chunk[1]))
        .map((factory) => String(factory))
        .join("\\n");
}})()
"""
