"""
Bloodcraft Test Suite
=====================

Test Organization
-----------------
- tests/unit/          : Fast unit tests (curve, formulas, services, infra)
- tests/unit/domain/   : Pure domain logic and models
- tests/integration/   : End-to-end flows through the service container

Testing Philosophy
------------------
- Use pytest markers (unit, domain, integration) to select tests
- Follow AAA pattern: Arrange, Act, Assert
"""
