"""Project Fusion edge functions: device ingestion, operator sessions and referral notifications."""
