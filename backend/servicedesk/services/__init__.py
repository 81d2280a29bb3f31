"""Services module.

This module provides the service layer architecture:
- exceptions: Custom service exceptions
- codes: Dedicated number and contract code allocation
- clients: Client management
- contracts: Contract creation and renewal
- users: Contract creator records
"""
