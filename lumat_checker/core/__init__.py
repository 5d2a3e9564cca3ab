"""lumat_checker.core — Foundation layer.

Contains the type definitions, colour conversion, named backgrounds, scale
generation, contrast metrics, pairwise matrix, filters, usage advisor,
auto-fix optimizers, opacity blending, scale file parser and report builder.
This module has NO dependencies on lumat_checker.techniques or
lumat_checker.registry.
Third-party imports here are limited to coloraide (colour spaces, gamut,
contrast) and numpy (blend arithmetic).
"""
