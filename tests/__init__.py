"""Test package for Guess the Airline.

Core tests exercise the sampler, question generator, round engine and
preference stores directly. UI smoke tests run pygame headlessly with the
dummy SDL drivers; run everything with ``pytest`` from the project root.
"""
