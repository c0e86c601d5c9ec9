"""Parcel label driver lookup.

Reads a photographed delivery label with Tesseract OCR and resolves the
recognized address text to the responsible driver using a keyword table.
"""
