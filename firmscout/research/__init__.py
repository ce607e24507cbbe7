"""
Firm research pipeline.

Key Components:
- taxonomy: free text -> closed investor vocabularies
- prompts: prompt builders for firm search and enrichment
- canonicalizer: JSON extraction and record canonicalization
- contact_validation: post-validation of generated contact details
- investor_search: search -> generate -> canonicalize -> store
- contact_enrichment: per-contact enrichment and contact discovery
- firm_enrichment: philosophy / AUM / check size / news for one firm
"""
