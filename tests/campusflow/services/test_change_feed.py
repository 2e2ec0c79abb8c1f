import asyncio
import threading
from types import SimpleNamespace

import pytest

from campusflow.services.change_feed import ChangeFeed
from campusflow.services.notification_service import NotificationService
from campusflow.services.policy import Caller


def test_notification_insert_reaches_only_its_owner(store, feed, make_caller) -> None:
    owner = make_caller()
    someone_else = make_caller()
    service = NotificationService(store.db, store)

    async def scenario():
        subscription = feed.subscribe('notifications', owner)
        try:
            service.notify(someone_else.id, 'Library', 'Your book is due.')
            assert subscription.pending() == 0

            created = service.notify(owner.id, 'Welcome', 'Your account is ready.')
            event = await asyncio.wait_for(subscription.get(), timeout=1)
            assert subscription.pending() == 0
            return created, event
        finally:
            subscription.close()

    created, event = asyncio.run(scenario())

    assert event['id'] == created.id
    assert event['user_id'] == owner.id
    assert event['title'] == 'Welcome'
    assert event['read'] is False


def test_class_scoped_insert_reaches_matching_department(store, feed, make_caller) -> None:
    lecturer = make_caller(role='lecturer', department='CS')
    cs_student = make_caller(department='CS-Y2')
    ee_student = make_caller(department='EE-Y1')

    async def scenario():
        cs_subscription = feed.subscribe('assignments', cs_student)
        ee_subscription = feed.subscribe('assignments', ee_student)
        try:
            store.create('assignments', lecturer, {
                'title': 'Graph search',
                'class': 'CS-Y2',
                'submission_date': '2030-03-01T09:00:00',
            })
            event = await asyncio.wait_for(cs_subscription.get(), timeout=1)
            return event, ee_subscription.pending()
        finally:
            cs_subscription.close()
            ee_subscription.close()

    event, ee_pending = asyncio.run(scenario())

    assert event['title'] == 'Graph search'
    assert event['class'] == 'CS-Y2'
    assert ee_pending == 0


def test_events_arrive_in_insert_order(store, feed, make_caller) -> None:
    owner = make_caller()

    async def scenario():
        subscription = feed.subscribe('schedules', owner)
        try:
            for course in ('CS101', 'CS102', 'CS103'):
                store.create('schedules', owner, {
                    'course': course,
                    'day_of_week': 'friday',
                    'time': '10:00-11:00',
                    'location': 'Hall A',
                    'instructor': 'Dr. Osei',
                })
            return [(await subscription.get())['course'] for _ in range(3)]
        finally:
            subscription.close()

    assert asyncio.run(scenario()) == ['CS101', 'CS102', 'CS103']


def test_publish_from_worker_thread_is_delivered() -> None:
    feed = ChangeFeed(queue_size=5)
    caller = Caller(id='owner-1')
    row = SimpleNamespace(user_id=caller.id)

    async def scenario():
        subscription = feed.subscribe('notifications', caller)
        worker = threading.Thread(target=feed.publish, args=('notifications', row, {'id': 1}))
        worker.start()
        worker.join()
        try:
            return await asyncio.wait_for(subscription.get(), timeout=1)
        finally:
            subscription.close()

    assert asyncio.run(scenario()) == {'id': 1}


def test_full_queue_drops_only_for_the_slow_subscriber() -> None:
    feed = ChangeFeed(queue_size=2)
    caller = Caller(id='owner-1')
    row = SimpleNamespace(user_id=caller.id)

    async def scenario():
        slow = feed.subscribe('notifications', caller)
        fast = feed.subscribe('notifications', caller)
        try:
            feed.publish('notifications', row, {'id': 1})
            assert await fast.get() == {'id': 1}
            feed.publish('notifications', row, {'id': 2})
            assert await fast.get() == {'id': 2}
            feed.publish('notifications', row, {'id': 3})
            assert await fast.get() == {'id': 3}
            return slow.dropped, slow.pending(), fast.dropped
        finally:
            slow.close()
            fast.close()

    assert asyncio.run(scenario()) == (1, 2, 0)


def test_close_unsubscribes_and_ends_iteration() -> None:
    feed = ChangeFeed(queue_size=5)
    caller = Caller(id='owner-1')
    row = SimpleNamespace(user_id=caller.id)

    async def scenario():
        subscription = feed.subscribe('notifications', caller)
        assert feed.subscriber_count('notifications') == 1
        feed.publish('notifications', row, {'id': 1})
        subscription.close()
        subscription.close()
        received = [event async for event in subscription]
        delivered_after_close = feed.publish('notifications', row, {'id': 2})
        return received, delivered_after_close

    received, delivered_after_close = asyncio.run(scenario())

    assert received == []
    assert delivered_after_close == 0
    assert feed.subscriber_count('notifications') == 0


def test_subscribe_requires_a_running_loop() -> None:
    with pytest.raises(RuntimeError):
        ChangeFeed().subscribe('notifications', Caller(id='owner-1'))
