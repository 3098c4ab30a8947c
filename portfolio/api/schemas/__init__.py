# This file marks the schemas package for request payload and response envelope models.
# Entity payload models carry the camelCase wire names stored in documents.
