# meal models — the meal plan attached to an assessment
# mirrors frontend types Meal, FoodItem

from typing import Literal, Optional
from pydantic import BaseModel, Field, model_validator


class FoodItem(BaseModel):
    """one food in a meal, with optional substitutions"""
    id: Optional[str] = None
    name: str = Field(..., min_length=1)
    quantity: str = Field(..., min_length=1)
    calories: float = Field(0.0, ge=0)
    substitutions: Optional[str] = None


class Meal(BaseModel):
    id: str
    patient_id: str = Field(..., alias="patientId")
    assessment_id: str = Field(..., alias="assessmentId")
    name: str
    description: str = ""
    quantity: str = ""
    calories: float = 0.0
    time: str
    type: Literal["normal", "free"] = "normal"
    foods: list[FoodItem] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


class MealCreate(BaseModel):
    """meal payload. calories follow the foods for normal meals; free meals carry none"""
    assessment_id: str = Field(..., alias="assessmentId")
    name: str = Field(..., min_length=1)
    description: str = ""
    calories: float = Field(0.0, ge=0)
    time: str = Field(..., min_length=1, description="time of day or frequency, e.g. 07:30")
    type: Literal["normal", "free"] = "normal"
    foods: list[FoodItem] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def total_calories(self):
        if self.type == "free":
            self.calories = 0.0
        elif self.foods:
            self.calories = sum(food.calories for food in self.foods)
        return self
