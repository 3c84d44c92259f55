"""Activity suggestion tests."""
import json
from datetime import time
from types import SimpleNamespace

import pytest

from classroll.exceptions import NotFound, Unauthorized, ValidationError
from classroll.models.activity import ActivityType
from classroll.services.suggestion_service import SuggestionService, free_periods

def _slot(start, end):
    return SimpleNamespace(start_time=start, end_time=end)

def test_free_periods_between_sessions():
    sessions = [_slot(time(11, 0), time(12, 30)), _slot(time(9, 0), time(10, 0))]
    assert free_periods(sessions, time(8, 0), time(17, 0)) == [
        (time(8, 0), time(9, 0)),
        (time(10, 0), time(11, 0)),
        (time(12, 30), time(17, 0)),
    ]

def test_free_periods_edge_cases():
    day = (time(8, 0), time(17, 0))
    assert free_periods([], *day) == [day]
    # Overlapping sessions and ones running past the end of the day
    sessions = [_slot(time(8, 0), time(10, 0)), _slot(time(9, 30), time(11, 0)), _slot(time(16, 0), time(18, 0))]
    assert free_periods(sessions, *day) == [(time(11, 0), time(16, 0))]
    assert free_periods([_slot(time(7, 0), time(18, 0))], *day) == []

@pytest.fixture
def service(registry):
    return SuggestionService(registry=registry, per_day=3)

@pytest.fixture
def activities(service, teacher):
    created = {
        'algebra': service.create_activity(teacher.id, {
            'title': 'Algebra drill', 'activity_type': 'practice', 'difficulty_level': 2,
            'estimated_minutes': 30, 'required_interests': ['math']
        }),
        'reading': service.create_activity(teacher.id, {
            'title': 'Library reading', 'activity_type': 'study', 'estimated_minutes': 45
        }),
        'drawing': service.create_activity(teacher.id, {
            'title': 'Sketching', 'activity_type': 'skill', 'required_interests': ['art']
        }),
    }
    retired = service.create_activity(teacher.id, {'title': 'Old quiz', 'activity_type': 'quiz'})
    retired.update(is_active=False)
    return created

def test_rank_activities_by_interest(service, activities, students):
    service.add_interest(students[0].id, 'Math', strength_level=3)

    ranked = service.rank_activities(students[0].id)

    assert [activity.title for activity in ranked] == ['Algebra drill', 'Library reading']

def test_generate_places_suggestions_in_free_periods(service, activities, students, class_session, clock):
    service.add_interest(students[0].id, 'math', strength_level=3)

    created = service.generate(students[0].id, clock().date())

    placed = [(s.activity.title, s.free_period_start, s.free_period_end) for s in created]
    assert placed == [
        ('Algebra drill', time(8, 0), time(8, 30)),
        ('Library reading', time(10, 0), time(10, 45)),
    ]
    # Nothing new left to suggest for the same day
    assert service.generate(students[0].id, clock().date()) == []
    assert len(service.list_open(students[0].id, clock().date())) == 2

def test_generate_respects_daily_limit(registry, activities, students, clock):
    service = SuggestionService(registry=registry, per_day=1)
    assert len(service.generate(students[1].id, clock().date())) == 1
    assert service.generate(students[1].id, clock().date()) == []

def test_complete_suggestion(service, activities, students, clock):
    suggestion = service.generate(students[1].id, clock().date())[0]

    with pytest.raises(Unauthorized):
        service.complete(suggestion.id, students[0].id)
    with pytest.raises(ValidationError):
        service.complete(suggestion.id, students[1].id, rating=6)
    with pytest.raises(NotFound):
        service.complete('missing', students[1].id)

    done = service.complete(suggestion.id, students[1].id, rating=5, feedback='Fun')
    assert done.completed is True
    assert done.rating == 5
    assert service.list_open(students[1].id, clock().date()) == []

def test_create_activity_validation(service, teacher):
    with pytest.raises(ValidationError):
        service.create_activity(teacher.id, {'title': 'X'})
    with pytest.raises(ValidationError):
        service.create_activity(teacher.id, {'title': 'X', 'activity_type': 'nap'})
    with pytest.raises(ValidationError):
        service.create_activity(teacher.id, {'title': 'X', 'activity_type': 'study', 'estimated_minutes': 0})

    activity = service.create_activity(teacher.id, {'title': ' Trivia ', 'activity_type': 'QUIZ'})
    assert activity.title == 'Trivia'
    assert activity.activity_type == ActivityType.QUIZ
    assert activity.required_interests == []

def test_suggestion_endpoints(client, auth_headers, teacher, students, class_session):
    response = client.post('/api/activities/', json={
        'title': 'Robotics club', 'activity_type': 'project', 'required_interests': ['robots']
    }, headers=auth_headers(teacher))
    assert response.status_code == 201
    assert client.post('/api/activities/', json={'title': 'Nope', 'activity_type': 'study'},
                       headers=auth_headers(students[0])).status_code == 403

    headers = auth_headers(students[0])
    assert client.post('/api/activities/interests', json={'interest': 'Robots', 'strength_level': 4},
                       headers=headers).status_code == 201

    generated = json.loads(client.post('/api/activities/suggestions/generate', headers=headers).data)['data']
    assert [s['activity']['title'] for s in generated] == ['Robotics club']
    assert generated[0]['free_period_start'] == '08:00:00'

    today_list = json.loads(client.get('/api/activities/suggestions/today', headers=headers).data)['data']
    assert len(today_list) == 1

    response = client.post(f"/api/activities/suggestions/{generated[0]['id']}/complete",
                           json={'rating': 4}, headers=headers)
    assert response.status_code == 200
    assert json.loads(response.data)['data']['completed'] is True

def test_goal_endpoints(client, auth_headers, students):
    headers = auth_headers(students[0])
    response = client.post('/api/activities/goals',
                           json={'goal': 'Finish calculus', 'target_date': '2026-06-01', 'priority': 5},
                           headers=headers)
    assert response.status_code == 201
    assert client.post('/api/activities/goals', json={'goal': 'X', 'target_date': 'soon'},
                       headers=headers).status_code == 400

    goals = json.loads(client.get('/api/activities/goals', headers=headers).data)['data']
    assert [goal['goal'] for goal in goals] == ['Finish calculus']
