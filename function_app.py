import azure.functions as func

from film_recommendation_service.blueprints.recommendations_bp import bp

app = func.FunctionApp()

app.register_blueprint(bp)
