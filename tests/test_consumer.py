import pytest

from rntpsim.consumer import (
    CapsuleInfo,
    GenericConsumer,
    InterestBroadcastInfo,
    ResequenceQueue,
    format_capsule_log,
    interest_broadcast_content,
    interest_broadcast_name,
    parse_capsule_name,
)
from rntpsim.events import Scheduler
from rntpsim.logs import LogName, LogSet


def test_parse_short_capsule_name():
    info = parse_capsule_name("/sensor/a/Capsule/12")
    assert info.prefix == "/sensor/a"
    assert info.data_id == 12
    assert info.nonce == 0
    assert info.node_ids == []
    assert info.trans_hop_node_id == 0xFFFFFFFF
    assert info.n_hops == 0


def test_parse_long_capsule_name():
    info = parse_capsule_name("/sensor/a/Capsule/7/99/4/1-2-3/2")
    assert info.prefix == "/sensor/a"
    assert info.data_id == 7
    assert info.nonce == 99
    assert info.trans_hop_node_id == 4
    assert info.node_ids == [1, 2, 3]
    assert info.n_hops == 2


def test_parse_rejects_non_numeric_id():
    with pytest.raises(ValueError):
        parse_capsule_name("/sensor/a/Capsule/x")


def test_interest_broadcast_name_layout():
    info = InterestBroadcastInfo("/sensor/a", consumer_node_id=5, trans_hop_node_id=6, nonce=77, end=True)
    assert interest_broadcast_name(info) == "/sensor/a/InterestBroadcast/0/5/6/77/true"
    info.end = False
    assert interest_broadcast_name(info).endswith("/77/false")


def test_interest_broadcast_content_is_two_zero_counts():
    content = interest_broadcast_content()
    assert len(content) == 16
    assert set(content) == {0}


def test_format_capsule_log_joins_node_ids():
    info = CapsuleInfo("/sensor/a", 4, trans_hop_node_id=7, node_ids=[1, 2, 3], n_hops=2)
    assert format_capsule_log(3, 1.5, info) == "3,1.5,r,Data,7,/sensor/a,4,1|2|3,2"


def _queue(size=10, wait=1.0):
    scheduler = Scheduler()
    released = []
    queue = ResequenceQueue(size, wait, scheduler, lambda info, data: released.append(info.data_id))
    return scheduler, queue, released


def test_in_order_capsules_pass_straight_through():
    _, queue, released = _queue()
    for data_id in range(4):
        queue.receive(CapsuleInfo("/p/q", data_id))
    assert released == [0, 1, 2, 3]
    assert len(queue) == 0


def test_gap_is_held_until_the_timer_releases_it():
    scheduler, queue, released = _queue()
    for data_id in (0, 2, 3):
        queue.receive(CapsuleInfo("/p/q", data_id))
    assert released == [0]
    assert len(queue) == 2
    queue.receive(CapsuleInfo("/p/q", 1))
    assert released == [0, 1]
    scheduler.run(until=5.0)
    assert released == [0, 1, 2, 3]
    assert len(queue) == 0


def test_expired_gap_is_skipped():
    scheduler, queue, released = _queue(wait=1.0)
    queue.receive(CapsuleInfo("/p/q", 0))
    queue.receive(CapsuleInfo("/p/q", 2))
    scheduler.run(until=0.5)
    assert released == [0]
    scheduler.run(until=2.0)
    assert released == [0, 2]
    assert queue.last_data_id == 2


def test_full_queue_gives_up_its_lowest_entry():
    _, queue, released = _queue(size=2)
    for data_id in (0, 3, 5, 7):
        queue.receive(CapsuleInfo("/p/q", data_id))
    assert released == [0, 3]
    assert len(queue) == 2


def test_consumer_start_sends_interest_and_logs(tmp_path):
    scheduler = Scheduler()
    interests = []
    with LogSet(tmp_path) as logs:
        consumer = GenericConsumer(
            scheduler, "/sensor/a", 5, 1.0,
            send_interest=lambda name, nonce, lifetime: interests.append((name, nonce, lifetime)),
            logs=logs,
        )
        nonce = consumer.start()
    assert interests == [("/sensor/a", nonce, 10.0)]
    assert 0 <= nonce <= 0xFFFFFFFF
    text = (tmp_path / LogName.CONSUMER.value).read_text()
    assert text == "5,0,s,Interest,/sensor/a\n"


def test_consumer_on_data_counts_and_resequences(tmp_path):
    scheduler = Scheduler()
    with LogSet(tmp_path) as logs:
        consumer = GenericConsumer(scheduler, "/sensor/a", 5, 1.0, logs=logs)
        consumer.start()
        consumer.on_data("/sensor/a/Capsule/0")
        consumer.on_data("/sensor/a/Capsule/1")
    assert consumer.n_received == 2
    assert [info.data_id for info in consumer.resequenced] == [0, 1]
    reseq = (tmp_path / LogName.CONSUMER_RESEQ.value).read_text().splitlines()
    assert len(reseq) == 2
    sizes = (tmp_path / LogName.CONSUMER_QUEUE_SIZE.value).read_text().splitlines()
    assert sizes == ["0,0", "0,0"]


def test_consumer_rejects_data_before_start():
    consumer = GenericConsumer(Scheduler(), "/sensor/a", 5, 1.0)
    with pytest.raises(RuntimeError):
        consumer.on_data("/sensor/a/Capsule/0")


def test_consumer_terminates_transport_after_delay():
    scheduler = Scheduler()
    sent = []
    consumer = GenericConsumer(
        scheduler, "/sensor/a", 5, 1.0,
        send_data=lambda name, content: sent.append((name, content, scheduler.now)),
        terminate_after=3.0,
    )
    consumer.start()
    scheduler.run(until=10.0)
    assert len(sent) == 1
    name, content, when = sent[0]
    assert when == 3.0
    assert name.startswith("/sensor/a/InterestBroadcast/0/5/5/")
    assert name.endswith("/true")
    nonce = int(name.split("/")[-2])
    assert 1 <= nonce <= 0xFFFFFFFF
    assert content == interest_broadcast_content()