# This file marks the routers package for API route modules.
# Each module registers the endpoints of one resource group.
# Route modules stay thin and delegate to the service layer.
