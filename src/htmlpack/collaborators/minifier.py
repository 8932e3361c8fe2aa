"""
HTML minification collaborators.

``MinifyHtmlMinifier`` runs in-process on the minify-html library.
``NodeHtmlMinifier`` hands the full option record to html-minifier-terser.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

import minify_html

from ..config.models import MinifyOptions
from .node import run_node_module

logger = logging.getLogger(__name__)

_HTML_MINIFIER_MODULE = """
import { minify } from 'html-minifier-terser';

const request = JSON.parse(process.env.HTMLPACK_PAYLOAD);

let input = '';
process.stdin.setEncoding('utf8');
for await (const chunk of process.stdin) {
  input += chunk;
}
process.stdout.write(await minify(input, request.options));
"""


class HtmlMinifier(Protocol):
    def minify(self, html: str, options: MinifyOptions) -> str:
        """Return the minified document."""


class MinifyHtmlMinifier:
    """
    Minify with minify-html.

    minify-html always collapses whitespace, drops redundant quotes and
    shortens the doctype; the remaining options map onto its keyword flags.
    Attribute and class sorting are not supported and are ignored.
    """

    def minify(self, html: str, options: MinifyOptions) -> str:
        return minify_html.minify(
            html,
            keep_comments=not options.remove_comments,
            keep_input_type_text_attr=not options.remove_redundant_attributes,
            keep_closing_tags=True,
            keep_html_and_head_opening_tags=True,
            minify_css=options.minify_css,
            minify_js=options.minify_js,
        )


class NodeHtmlMinifier:
    """Minify with html-minifier-terser installed in ``project_root``."""

    def __init__(self, project_root: Path | str) -> None:
        self.project_root = Path(project_root)

    def minify(self, html: str, options: MinifyOptions) -> str:
        payload = {"options": options.model_dump(by_alias=True)}
        logger.debug("Running html-minifier-terser in %s", self.project_root)
        result = run_node_module(
            _HTML_MINIFIER_MODULE,
            payload,
            cwd=self.project_root,
            capture=True,
            input_text=html,
        )
        return result.stdout
