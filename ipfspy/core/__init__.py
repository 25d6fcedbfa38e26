"""Core building blocks for the ipfspy client."""
