"""
Business workflows of the accounting app.

Submodules are imported directly (``from accounting.services.ledger import ...``);
forms depend on the pure helpers in here, so nothing is re-exported at
package level.
"""
