"""Factories compiling type metadata into graphql-core types."""
