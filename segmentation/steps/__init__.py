"""
Transcript Segmentation Steps

This directory contains the numbered steps of the segmentation pipeline.
Each step represents a stage in turning a pasted transcript into messages:

1. Line Classification - Probes every line and records its neighbours
2. Pattern Aggregation - Builds the document profile (start candidates, etc.)
3. Boundary Resolution - Ranks candidates and resolves message segments
4. Message Extraction - Recovers header, body, reactions and thread marker
5. Validation - Drops spurious messages

The files are numbered for easy identification of the processing order.
"""
