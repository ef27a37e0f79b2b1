"""HTTP surface for Me-API Playground."""
