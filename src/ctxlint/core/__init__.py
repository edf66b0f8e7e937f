"""
Core Package.

Contains the analysis backend:
- Data model and error taxonomy
- Type universe and type binding
- The libcst source unit provider
- Reporter and orchestration engine
"""
