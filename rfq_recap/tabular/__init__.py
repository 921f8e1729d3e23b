"""Tabular input: CSV text tokenizer, spreadsheet grid parser and file reader."""
