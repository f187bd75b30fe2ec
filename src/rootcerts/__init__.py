"""
rootcerts — Mozilla NSS certdata.txt root certificate extractor.

Reads the NSS certdata.txt trust database, keeps only the certificates
marked as trusted to act as a CA, and generates a self-contained Python
module embedding them.

Built on the Railway-Oriented Programming (ROP) framework for
explicit, composable, functional error handling.
"""

__version__ = "0.1.0"
