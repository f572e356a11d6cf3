"""
swbuild - Shopware theme build pipeline.

Generates the LESS import manifest for a shop and drives lessc, postcss,
cleancss, uglifyjs and eslint through development and distribution
task graphs, with a watch mode for development.
"""

__version__ = "0.1.0"
