"""
Service layer abstraction.

Each service encapsulates one piece of the portal's decision logic or
one external collaborator.  Services receive their settings and
backends through the constructor so tests can substitute fakes.
"""
