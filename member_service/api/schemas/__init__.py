# This file marks the schemas package for API response and request models.
# Grouping contracts here keeps response typing easy to navigate.
