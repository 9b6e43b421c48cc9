from .cli import slack_main

slack_main()
