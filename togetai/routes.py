from togetai.api import AdminController, SubmissionController, health_routes

ROUTES = [
    *health_routes,
    SubmissionController,
    AdminController,
]
