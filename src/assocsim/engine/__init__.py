"""Pipeline stages: generation, outcome synthesis, missingness, binning, assembly."""
