"""
Adapters for the external tools the pipeline orchestrates.
"""

from .bundler import BundleRequest, Bundler, CopyBundler, ViteBundler
from .critical import CriticalCssExtractor, CriticalCssRequest, NodeCriticalExtractor
from .minifier import HtmlMinifier, MinifyHtmlMinifier, NodeHtmlMinifier
from .node import run_node_module

__all__ = [
    "BundleRequest",
    "Bundler",
    "CopyBundler",
    "ViteBundler",
    "CriticalCssExtractor",
    "CriticalCssRequest",
    "NodeCriticalExtractor",
    "HtmlMinifier",
    "MinifyHtmlMinifier",
    "NodeHtmlMinifier",
    "run_node_module",
]
