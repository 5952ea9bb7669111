import pytest

from dotmatrix.pcm import AudioSpec, Pcm, buffer_samples


def test_buffer_samples_for_default_rate():
    assert buffer_samples(44100) == 1024


@pytest.mark.parametrize("rate", [8000, 11025, 22050, 44100, 48000, 96000])
def test_buffer_samples_is_tight_power_of_two(rate):
    size = buffer_samples(rate)
    assert size & (size - 1) == 0
    assert size >= rate // 60
    assert size // 2 < rate // 60


def test_buffer_samples_tiny_rate():
    assert buffer_samples(0) == 1


def test_open_silent_defaults():
    pcm = Pcm()
    pcm.open()
    assert pcm.hz == 11025
    assert pcm.length == 4096
    assert pcm.stereo is False
    assert len(pcm.buf) == pcm.length


def test_open_with_spec():
    pcm = Pcm()
    spec = AudioSpec(samplerate=22050, stereo=True)
    pcm.open(spec)
    assert pcm.hz == 22050
    assert pcm.stereo is True
    assert pcm.length == buffer_samples(22050) * spec.channels


def test_put_fills_and_flushes():
    chunks = []
    pcm = Pcm(sink=chunks.append)
    pcm.open(AudioSpec(samplerate=600, stereo=False))
    values = list(range(pcm.length))
    for value in values:
        pcm.put(value)
    assert chunks == []
    pcm.put(200)
    assert chunks == [bytes(values)]
    assert pcm.pos == 1
    assert pcm.buf[0] == 200


def test_submit_before_full_keeps_data():
    chunks = []
    pcm = Pcm(sink=chunks.append)
    pcm.open()
    pcm.put(5)
    assert pcm.submit() is True
    assert chunks == []
    assert pcm.pos == 1


def test_closed_output_ignores_samples():
    pcm = Pcm()
    pcm.put(10)
    assert pcm.pos == 0
    assert pcm.submit() is False


def test_close_resets():
    pcm = Pcm()
    pcm.open(AudioSpec())
    pcm.put(1)
    pcm.close()
    assert (pcm.hz, pcm.length, pcm.pos, pcm.buf) == (0, 0, 0, None)