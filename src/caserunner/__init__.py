"""
caserunner - execution engine for class-based unit tests.

This package provides tools to:
- Run a test case through construction, before hooks, the test method,
  after hooks and disposal, isolating failures at each stage
- Name parameterized test cases after their bound arguments
- Stream structured lifecycle messages to an observer
"""

__version__ = "0.1.0"
__author__ = "caserunner Team"
