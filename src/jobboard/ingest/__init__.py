"""Ingestion from the Fantastic Jobs aggregation API (via RapidAPI).

client        — HTTP access with retries
query_builder — turns admin-facing filters into API query parameters
mapper        — API records → Organization / Job column values
fetcher       — runs a query, upserts the results, writes a FetchLog
"""
