"""Routing: route definitions, the matcher rules, and the Router.

Routes are registered during setup, compiled eagerly, and matched
against copies so the registered collection stays read-only.
"""
