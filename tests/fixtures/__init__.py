"""Importable test fixtures: sample provider payloads and builders."""
