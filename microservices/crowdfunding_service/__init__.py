"""
Crowdfunding Service

Escrow ledger for tiered crowdfunding campaigns.

Features:
- Fixed-price pledge tiers managed by the campaign owner
- Pledge intake with per-backer contribution accounting
- Status derived from goal, deadline and amount raised
- Owner withdrawal on success, backer refunds on failure
- Pause/resume gating of new pledges
- Factory registry of campaigns per creator
"""

__version__ = "1.0.0"
