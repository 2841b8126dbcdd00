"""Test package marker to allow imports like `tests.utils.*`.

Its presence makes `tests` an importable package so running `pytest` from the
project root does not require setting `PYTHONPATH=.`.
"""
