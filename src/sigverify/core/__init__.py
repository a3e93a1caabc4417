"""Verification engine: classification, parsing, hashing and signatures."""
