"""
News Shorts – turns a trending headline into a narrated vertical video.

  from news_shorts.application import Director
  from news_shorts.adapters import default_sources, default_stages
  director = Director(default_sources(), default_stages())
  refs = await director.list_top_content("thepaper")
  result = await director.produce(refs[0])
"""

__version__ = "0.3.0"
