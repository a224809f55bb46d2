import logging
import os

from fastapi import FastAPI

from quizapp.routes.users.user_creation import router as user_registration_router
from quizapp.routes.users.user_login import router as user_login_router
from quizapp.routes.users.user_profile import router as user_profile_router

from quizapp.routes.users.creator.quiz import router as creator_quiz_router
from quizapp.routes.users.creator.question import router as creator_question_router
from quizapp.routes.users.creator.quiz_submission import router as creator_quiz_submission_router
from quizapp.routes.users.creator.analytics import router as creator_analytics_router
from quizapp.routes.users.creator.invitation import router as creator_invitation_router

from quizapp.routes.users.taker.quiz_submission import router as taker_quiz_submission_router
from quizapp.routes.users.taker.invitation import router as taker_invitation_router

from quizapp.routes.public.quiz import router as public_quiz_router


logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


app=FastAPI(
    title="Quiz Platform"
)

@app.get("/")
def root():
    return {
        "message":"Quiz Platform is Running!"
        }


app.include_router(user_registration_router)
app.include_router(user_login_router)
app.include_router(user_profile_router)

app.include_router(creator_quiz_router)
app.include_router(creator_question_router)
app.include_router(creator_quiz_submission_router)
app.include_router(creator_analytics_router)
app.include_router(creator_invitation_router)

app.include_router(taker_quiz_submission_router)
app.include_router(taker_invitation_router)

app.include_router(public_quiz_router)
